from enum import IntEnum
from typing import Union


class Weekday(IntEnum):
    """
    Fixed Monday-first week, same numbering as ``datetime.weekday()``.
    """

    monday = 0
    tuesday = 1
    wednesday = 2
    thursday = 3
    friday = 4
    saturday = 5
    sunday = 6

    @property
    def previous(self) -> "Weekday":
        return Weekday((self.value - 1) % 7)

    @classmethod
    def parse(cls, value: Union[int, str, "Weekday"]) -> "Weekday":
        """
        Accepts 0-6, English names or the Spanish names the console sends
        (``"lunes"``, ``"sábado"``...). Raises ValueError otherwise.
        """
        if isinstance(value, Weekday):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid weekday: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            key = value.strip().casefold()
            if key.isdigit():
                return cls(int(key))
            if key in _ALIASES:
                return _ALIASES[key]
        raise ValueError(f"Invalid weekday: {value!r}")


_ALIASES = {day.name: day for day in Weekday}
_ALIASES.update(
    {
        "lunes": Weekday.monday,
        "martes": Weekday.tuesday,
        "miercoles": Weekday.wednesday,
        "miércoles": Weekday.wednesday,
        "jueves": Weekday.thursday,
        "viernes": Weekday.friday,
        "sabado": Weekday.saturday,
        "sábado": Weekday.saturday,
        "domingo": Weekday.sunday,
    }
)
