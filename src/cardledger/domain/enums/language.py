from enum import Enum


class Language(str, Enum):
    EN = "EN"
    DE = "DE"
    FR = "FR"
    IT = "IT"
    ES = "ES"
    JA = "JA"
    KO = "KO"
    PT = "PT"
    RU = "RU"
    ZH = "ZH"
    HE = "HE"
    LA = "LA"
    GR = "GR"
    AR = "AR"
