from django.urls import path

from marketplace.handlers import EventCollectionView, TierReservationView

urlpatterns = [
    path("events", EventCollectionView.as_view(), name="event-collection"),
    path(
        "events/<str:event_id>/tiers/<str:tier_id>/reserve",
        TierReservationView.as_view(),
        name="tier-reserve",
    ),
]
