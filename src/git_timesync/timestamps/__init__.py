from .setters import CalendarTimestampSetter, EpochTimestampSetter, TimestampSetter, select_timestamp_setter

__all__ = ["TimestampSetter", "EpochTimestampSetter", "CalendarTimestampSetter", "select_timestamp_setter"]
