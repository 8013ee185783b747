"""Keyword lookup tables used by scoring and pattern recognition.

Everything here is plain data so it can be tuned or replaced in tests
without touching the algorithms that consume it.
"""
from typing import Dict, List
from pydantic import BaseModel, Field


class KeywordRule(BaseModel):
    """Rating applied when a label contains any keyword and none of the exclusions"""
    keywords: List[str] = Field(description="Substrings that trigger the rule")
    unless: List[str] = Field(default_factory=list, description="Substrings that cancel the rule")
    rating: int = Field(ge=0, le=10, description="Productivity rating (0-10)")

    def matches(self, label: str) -> bool:
        return (
            any(k in label for k in self.keywords)
            and not any(u in label for u in self.unless)
        )


class TimeBand(BaseModel):
    """Time-of-day band with a productivity multiplier"""
    name: str
    start: int = Field(ge=0, le=23)
    end: int = Field(ge=1, le=24)
    modifier: float = Field(gt=0)


APP_RATINGS: Dict[str, int] = {
    # Development tools
    "vscode": 9, "visual studio": 9, "intellij": 9, "pycharm": 9, "sublime": 8,
    "vim": 9, "emacs": 9, "atom": 7, "notepad++": 6,
    "terminal": 8, "cmd": 7, "powershell": 8, "bash": 8,
    "git": 8, "docker": 7, "postman": 7,
    # Browsers, refined by window label
    "chrome": 5, "firefox": 5, "safari": 5, "edge": 5,
    # Communication
    "slack": 6, "teams": 6, "discord": 4, "telegram": 4,
    "skype": 6, "zoom": 7, "meet": 7, "webex": 7,
    "email": 6, "outlook": 6, "gmail": 5,
    # Design
    "figma": 8, "sketch": 8, "photoshop": 8, "illustrator": 8,
    "aftereffects": 7, "premiere": 7, "blender": 8,
    # Documents
    "notion": 7, "obsidian": 8, "onenote": 6, "evernote": 6,
    "word": 7, "docs": 7, "sheets": 7, "excel": 7,
    "powerpoint": 6, "slides": 6,
    # Entertainment
    "youtube": 2, "netflix": 1, "spotify": 3, "twitch": 1,
    "instagram": 1, "twitter": 2, "facebook": 1, "tiktok": 1,
    "reddit": 2, "pinterest": 2,
    # Games
    "steam": 1, "epic": 1, "origin": 1, "battle.net": 1,
    # System
    "finder": 4, "explorer": 4, "settings": 3, "control panel": 3,
    "task manager": 3, "system preferences": 3,
}

# Fallback ratings when an application is not in APP_RATINGS
APP_CATEGORY_FALLBACKS: List[KeywordRule] = [
    KeywordRule(keywords=["dev", "code"], rating=8),
    KeywordRule(keywords=["browser", "web"], rating=5),
    KeywordRule(keywords=["social", "media"], rating=2),
    KeywordRule(keywords=["game"], rating=1),
    KeywordRule(keywords=["work", "office"], rating=7),
]

BROWSERS: List[str] = ["chrome", "firefox", "safari", "edge", "browser"]

BROWSER_RULES: List[KeywordRule] = [
    KeywordRule(keywords=["github", "gitlab", "bitbucket"], rating=9),
    KeywordRule(keywords=["stackoverflow", "docs.", "documentation"], rating=8),
    KeywordRule(keywords=["jira", "trello", "asana"], rating=7),
    KeywordRule(keywords=["gmail", "outlook", "mail"], rating=6),
    KeywordRule(keywords=["calendar", "meet", "zoom"], rating=7),
    KeywordRule(keywords=["coursera", "udemy", "pluralsight"], rating=8),
    KeywordRule(keywords=["medium", "dev.to", "blog"], rating=6),
    KeywordRule(keywords=["wikipedia", "research"], rating=6),
    KeywordRule(keywords=["youtube"], unless=["tutorial"], rating=2),
    KeywordRule(keywords=["netflix", "hulu", "prime"], rating=1),
    KeywordRule(keywords=["facebook", "instagram", "twitter"], rating=1),
    KeywordRule(keywords=["reddit"], unless=["programming"], rating=2),
    KeywordRule(keywords=["amazon", "ebay", "shopping"], rating=2),
    KeywordRule(keywords=["news"], unless=["tech"], rating=3),
]

CODE_PATTERNS: List[str] = [
    r"\.(js|ts|py|java|cpp|c|h)\b",
    r"\b(function|class|import|export|const|let|var)\b",
    r"(if|for|while)\s*\(",
    r"//|/\*|\*/|<!--",
]

TIME_BANDS: List[TimeBand] = [
    TimeBand(name="early_morning", start=5, end=8, modifier=1.1),
    TimeBand(name="morning", start=8, end=12, modifier=1.2),
    TimeBand(name="early_afternoon", start=12, end=14, modifier=0.9),
    TimeBand(name="afternoon", start=14, end=17, modifier=1.1),
    TimeBand(name="evening", start=17, end=20, modifier=0.95),
    TimeBand(name="night", start=20, end=24, modifier=0.8),
    TimeBand(name="late_night", start=0, end=5, modifier=0.6),
]

# Keyed by datetime.weekday(): Monday is 0
DAY_MODIFIERS: Dict[int, float] = {
    0: 1.0, 1: 1.1, 2: 1.1, 3: 1.0, 4: 0.9, 5: 0.8, 6: 0.7,
}

SWITCH_CATEGORIES: Dict[str, List[str]] = {
    "productive": [
        "vscode", "code", "editor", "intellij", "pycharm", "sublime", "vim",
        "emacs", "terminal", "bash", "powershell", "cmd", "git", "docker",
        "browser", "chrome", "firefox", "safari", "edge", "notion", "obsidian",
        "word", "docs", "excel", "sheets", "figma", "postman",
    ],
    "communication": [
        "slack", "teams", "email", "mail", "outlook", "zoom", "meet",
        "webex", "skype", "discord", "telegram",
    ],
    "distracting": [
        "social", "entertainment", "games", "game", "youtube", "netflix",
        "twitch", "tiktok", "instagram", "facebook", "twitter", "reddit",
        "steam", "spotify", "pinterest",
    ],
}

DISTRACTION_SOURCES: Dict[str, List[str]] = {
    "social_media": ["social", "twitter", "facebook", "instagram", "tiktok", "reddit"],
    "entertainment": ["youtube", "netflix", "twitch", "spotify", "steam", "game"],
}

ACTIVITY_TYPES: Dict[str, List[str]] = {
    "development": [
        "vscode", "code", "pycharm", "intellij", "terminal", "git", "github",
        "vim", "emacs", "docker", "postman", "stackoverflow",
    ],
    "communication": ["slack", "teams", "outlook", "gmail", "email", "zoom", "meet", "chat"],
    "writing": ["word", "docs", "notion", "obsidian", "markdown", "latex", "overleaf"],
    "design": ["figma", "sketch", "photoshop", "illustrator", "blender"],
    "research": ["chrome", "firefox", "safari", "edge", "papers", "scholar", "research"],
    "entertainment": ["youtube", "netflix", "twitch", "spotify", "steam"],
    "social": ["twitter", "facebook", "instagram", "tiktok", "reddit"],
}


class LookupTables(BaseModel):
    """Injectable bundle of every lookup table"""
    app_ratings: Dict[str, int] = Field(default_factory=lambda: dict(APP_RATINGS))
    app_category_fallbacks: List[KeywordRule] = Field(default_factory=lambda: list(APP_CATEGORY_FALLBACKS))
    browsers: List[str] = Field(default_factory=lambda: list(BROWSERS))
    browser_rules: List[KeywordRule] = Field(default_factory=lambda: list(BROWSER_RULES))
    code_patterns: List[str] = Field(default_factory=lambda: list(CODE_PATTERNS))
    time_bands: List[TimeBand] = Field(default_factory=lambda: list(TIME_BANDS))
    day_modifiers: Dict[int, float] = Field(default_factory=lambda: dict(DAY_MODIFIERS))
    switch_categories: Dict[str, List[str]] = Field(default_factory=lambda: dict(SWITCH_CATEGORIES))
    distraction_sources: Dict[str, List[str]] = Field(default_factory=lambda: dict(DISTRACTION_SOURCES))
    activity_types: Dict[str, List[str]] = Field(default_factory=lambda: dict(ACTIVITY_TYPES))

    def category_of(self, application: str) -> str:
        """Switch category (productive/communication/distracting/other) of an application"""
        app = application.lower()
        for category in ("communication", "distracting", "productive"):
            if any(keyword in app for keyword in self.switch_categories.get(category, [])):
                return category
        return "other"


default_tables = LookupTables()
