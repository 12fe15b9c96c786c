from django.contrib import admin

from marketplace.models import Event, Reservation, TicketTier


class TicketTierInline(admin.TabularInline):
    model = TicketTier
    extra = 1


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ["name", "type", "featured", "starts_at", "city", "created_at"]
    list_filter = ["type", "featured"]
    search_fields = ["id", "name", "city", "organizer_name"]
    inlines = [TicketTierInline]


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ["tier", "quantity", "remaining", "created_at"]
    list_filter = ["tier__event"]
    readonly_fields = ["id", "tier", "quantity", "remaining", "created_at"]
