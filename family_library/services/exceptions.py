"""
Domain errors raised by the service layer.

Each carries the HTTP status the API answers with, so routers can let them
propagate to the application's exception handler.
"""

from fastapi import status


class LibraryError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LibraryError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(LibraryError):
    status_code = status.HTTP_409_CONFLICT


class DuplicateUsernameError(ConflictError):
    def __init__(self, username: str):
        super().__init__(f"Username '{username}' is already taken")


class AlreadyMemberError(ConflictError):
    def __init__(self, user_id: int, family_id: int):
        super().__init__(f"User {user_id} is already a member of family {family_id}")


class InvalidShelfPositionError(LibraryError):
    def __init__(self, shelf: int, num_shelves: int):
        super().__init__(
            f"Shelf {shelf} is out of range for a bookshelf with {num_shelves} shelves"
        )


class BookUnavailableError(ConflictError):
    def __init__(self, book_id: int, book_status: str):
        super().__init__(f"Book {book_id} is not available (status: {book_status})")


class LendingAlreadyReturnedError(ConflictError):
    def __init__(self, lending_id: int):
        super().__init__(f"Lending {lending_id} has already been returned")


class ReadingAlreadyCompletedError(ConflictError):
    def __init__(self, history_id: int):
        super().__init__(f"Reading session {history_id} is already completed")


class BookshelfNotEmptyError(ConflictError):
    def __init__(self, bookshelf_id: int):
        super().__init__(f"Bookshelf {bookshelf_id} still holds books")


class MembershipNotFoundError(NotFoundError):
    def __init__(self, user_id: int, family_id: int):
        LibraryError.__init__(self, f"User {user_id} is not a member of family {family_id}")
        self.entity = "Membership"
        self.entity_id = user_id


class BookStatusConflictError(ConflictError):
    def __init__(self, book_id: int, requested: str, expected: str):
        super().__init__(
            f"Book {book_id} cannot be marked {requested} while its loans and "
            f"reading sessions make it {expected}"
        )
