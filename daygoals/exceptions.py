"""Domain exceptions.

Services follow the ValueError convention for not-found and invalid input;
these subclasses mark the cases callers may want to tell apart.
"""


class GoalConflictError(ValueError):
    """A second binding for the same user, goal type and day.

    Reserved: assignment merges into the existing binding instead.
    """


class MalformedCommandError(ValueError):
    """An inbound command is unknown or is missing a required parameter."""
