"""Generated description assist for event drafts.

Text generation is an external service reached through DescriptionGenerator;
this module only builds prompts from a draft and applies the result.
"""

from typing import Protocol

from loguru import logger

from marketplace.domain.drafts import (
    EventDraft,
    SetOrganizerField,
    SetTierField,
    apply_command,
)


class DescriptionGenerator(Protocol):
    def generate(self, prompt: str) -> str: ...


def _event_details(draft: EventDraft) -> list[str]:
    location = draft.location
    return [
        f"Event Name: {draft.name}",
        f"Event Type: {draft.type}",
        f"Event Date Time: {draft.starts_at.isoformat() if draft.starts_at else ''}",
        f"Event End Date Time: {draft.ends_at.isoformat() if draft.ends_at else ''}",
        f"Event Venue: {location.venue}",
        f"Event Address: {location.address}",
        f"Event City: {location.city}",
        f"Event Country: {location.country}",
    ]


def tier_description_prompt(draft: EventDraft, index: int) -> str:
    tier = draft.ticket_tiers[index]
    lines = [
        "Write a short description of the ticket tier in two simple paragraphs, "
        "based on the following details:",
        "",
        f"Ticket Tier: {tier.name}",
        *_event_details(draft),
        f"Event Starting Price: {draft.starting_price if draft.starting_price is not None else ''}",
        f"Event Organizer Name: {draft.organizer.name}",
        f"Event Organizer Description: {draft.organizer.description}",
    ]
    return "\n".join(lines)


def organizer_description_prompt(draft: EventDraft) -> str:
    lines = [
        "Write a three line description of the event organizer, "
        "based on the following details:",
        "",
        f"Organizer Name: {draft.organizer.name}",
        *_event_details(draft),
    ]
    return "\n".join(lines)


def suggest_tier_description(
    draft: EventDraft, index: int, generator: DescriptionGenerator
) -> EventDraft:
    """Return the draft with tier ``index`` described by the generator.

    Raises:
        IndexError: If there is no tier at ``index``.
    """
    if not 0 <= index < len(draft.ticket_tiers):
        raise IndexError(f"No ticket tier at position {index}")
    text = generator.generate(tier_description_prompt(draft, index)).strip()
    logger.debug(f"Generated {len(text)} characters for ticket tier {index}")
    return apply_command(draft, SetTierField(index=index, field="description", value=text))


def suggest_organizer_description(
    draft: EventDraft, generator: DescriptionGenerator
) -> EventDraft:
    text = generator.generate(organizer_description_prompt(draft)).strip()
    logger.debug(f"Generated {len(text)} characters for organizer description")
    return apply_command(draft, SetOrganizerField(field="description", value=text))
