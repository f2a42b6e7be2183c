from enum import Enum


class Finish(str, Enum):
    NONFOIL = "nonfoil"
    FOIL = "foil"
    ETCHED = "etched"

    @property
    def is_foil(self) -> bool:
        return self is not Finish.NONFOIL
