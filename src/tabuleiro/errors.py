"""Contract errors raised when upstream data does not match the rule tables."""


class RulesError(Exception):
    """Base class for every error the rules engine surfaces to callers."""

    pass


class RulesDataError(RulesError):
    """Raised when a rule table file cannot be loaded or validated."""

    pass


class UnknownSkillError(RulesError, KeyError):
    """Raised when a skill id is not present in the skill table."""

    def __init__(self, skill_id: str) -> None:
        self.skill_id = skill_id
        super().__init__(f"Unknown skill id: {skill_id!r}")

    def __str__(self) -> str:
        return f"Unknown skill id: {self.skill_id!r}"


class UnknownConditionError(RulesError, KeyError):
    """Raised when a condition id is not present in the condition table."""

    def __init__(self, condition_id: str) -> None:
        self.condition_id = condition_id
        super().__init__(f"Unknown condition id: {condition_id!r}")

    def __str__(self) -> str:
        return f"Unknown condition id: {self.condition_id!r}"


class UnknownAttributeError(RulesError, KeyError):
    """Raised when an attribute name is not one of the six core attributes."""

    def __init__(self, attribute: str) -> None:
        self.attribute = attribute
        super().__init__(f"Unknown attribute: {attribute!r}")

    def __str__(self) -> str:
        return f"Unknown attribute: {self.attribute!r}"


class UnknownTableEntryError(RulesError, KeyError):
    """Raised when a size or archetype id is missing from its table."""

    def __init__(self, table: str, entry_id: str) -> None:
        self.table = table
        self.entry_id = entry_id
        super().__init__(f"Unknown {table} id: {entry_id!r}")

    def __str__(self) -> str:
        return f"Unknown {self.table} id: {self.entry_id!r}"


class InvalidModifierError(RulesError, ValueError):
    """Raised when a modifier is malformed (empty name or sign disagreeing with its kind)."""

    pass


class KeyAttributeRequiredError(RulesError, ValueError):
    """Raised when a skill without a default key attribute is rolled without choosing one."""

    def __init__(self, skill_id: str) -> None:
        self.skill_id = skill_id
        super().__init__(f"Skill {skill_id!r} has no default key attribute; one must be chosen")


class InvalidVulnerabilityDieError(RulesError, ValueError):
    """Raised when a vulnerability die size is not on the ladder."""

    def __init__(self, faces: int) -> None:
        self.faces = faces
        super().__init__(f"Invalid vulnerability die: d{faces}")


class InvalidConditionError(RulesError, ValueError):
    """Raised when an applied condition has a malformed stack count."""

    def __init__(self, condition_id: str, message: str) -> None:
        self.condition_id = condition_id
        super().__init__(f"Condition {condition_id!r}: {message}")


class InvalidRestInputError(RulesError, ValueError):
    """Raised when a rest is computed for a level below 1 or a negative attribute."""

    pass
