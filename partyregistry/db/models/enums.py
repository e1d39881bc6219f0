from enum import Enum

class Ideology(str, Enum):
    left = "left"
    right = "right"
    center = "center"
    conservative = "conservative"
    liberal = "liberal"
    social_democrat = "social_democrat"
    nationalist = "nationalist"
    regionalist = "regionalist"

    @property
    def label(self) -> str:
        return IDEOLOGY_LABELS[self]

IDEOLOGY_LABELS = {
    Ideology.left: "Left",
    Ideology.right: "Right",
    Ideology.center: "Center",
    Ideology.conservative: "Conservative",
    Ideology.liberal: "Liberal",
    Ideology.social_democrat: "Social Democrat",
    Ideology.nationalist: "Nationalist",
    Ideology.regionalist: "Regionalist",
}

# フォーム用の推奨カラー（DB 側では検証しない）
REPRESENTATIVE_COLORS = [
    ("#DC2626", "Red"),
    ("#2563EB", "Blue"),
    ("#16A34A", "Green"),
    ("#EA580C", "Orange"),
    ("#7C3AED", "Purple"),
    ("#BE123C", "Pink"),
    ("#0891B2", "Cyan"),
    ("#65A30D", "Lime"),
    ("#1F2937", "Dark Gray"),
]
