from sqlalchemy import event

from .models import Property
from .utils import compute_price_per_sqm


@event.listens_for(Property, "before_insert")
def set_price_per_sqm(mapper, connection, target: Property):
    target.price_per_sqm = compute_price_per_sqm(target.price, target.area)


@event.listens_for(Property, "before_update")
def refresh_price_per_sqm(mapper, connection, target: Property):
    target.price_per_sqm = compute_price_per_sqm(target.price, target.area)
