"""Factory Boy definitions for log entries and their images."""

from __future__ import annotations

from datetime import date

import factory

from tests.factories import BaseFactory
from tests.factories.user import UserFactory
from yuroku.models.image import Image
from yuroku.models.log_entry import LogEntry


class LogEntryFactory(BaseFactory):
    """Build persisted :class:`LogEntry` rows owned by a fresh user by default."""

    class Meta:
        model = LogEntry

    id = None
    owner = factory.SubFactory(UserFactory)
    name = factory.Sequence(lambda n: f"Onsen {n}")
    location = factory.Faker("city")
    spring_type = "simple"
    features = factory.LazyFunction(list)
    visit_date = factory.Sequence(lambda n: date(2024, 1, 1).replace(day=(n % 28) + 1))
    rating = 3
    comment = ""


class ImageFactory(BaseFactory):
    """Build persisted :class:`Image` rows attached to a log entry."""

    class Meta:
        model = Image

    id = None
    log_entry = factory.SubFactory(LogEntryFactory)
    user_id = factory.LazyAttribute(lambda o: o.log_entry.user_id)
    image_url = factory.Sequence(lambda n: f"/uploads/img{n}.jpg")
    description = None
