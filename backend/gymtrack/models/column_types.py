from sqlalchemy import Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, TypeDecorator


class JSONList(TypeDecorator):
    """JSON array column: JSONB on PostgreSQL, plain JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())

    def process_bind_param(self, value, dialect):
        if value is None:
            return []
        return list(value)

    def process_result_value(self, value, dialect):
        return list(value or [])


class AttributeType(TypeDecorator):
    """Stores an Attribute member as its integer value."""

    impl = Integer
    cache_ok = True

    def __init__(self, attribute, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.attribute = attribute

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(self.attribute(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self.attribute(value)


class AttributeSet(JSONList):
    """
    Stores a set of Attribute members as a sorted JSON array of integers.

    Order never matters for these columns, sorting keeps equal sets equal
    on disk.
    """

    cache_ok = True

    def __init__(self, attribute, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.attribute = attribute

    def process_bind_param(self, value, dialect):
        if value is None:
            return []
        return sorted({int(self.attribute(v)) for v in value})

    def process_result_value(self, value, dialect):
        return [self.attribute(v) for v in value or []]
