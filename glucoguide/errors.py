class GlucoGuideError(Exception):
    pass


class InvalidInputError(GlucoGuideError, ValueError):
    pass


class UserNotFoundError(GlucoGuideError, LookupError):
    def __init__(self, user_id):
        super().__init__(f"User {user_id!r} not found.")
        self.user_id = user_id


class CollaboratorFailure(GlucoGuideError):
    """The document store was unreachable or rejected a write.

    Multi-document operations are not transactional, so state may be
    partially applied when this is raised mid-operation.
    """
