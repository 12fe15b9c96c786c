from marketplace.handlers.views import EventCollectionView, TierReservationView

__all__ = ["EventCollectionView", "TierReservationView"]
