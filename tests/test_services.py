"""Tests for the service layer rules."""

from datetime import timedelta

import pytest

from family_library.core.security import verify_password
from family_library.schemas import (
    ActivityCreate,
    BookCreate,
    BookLendingCreate,
    BookshelfCreate,
    BookshelfUpdate,
    BookUpdate,
    FamilyCreate,
    ReadingHistoryComplete,
    ReadingHistoryCreate,
    UserCreate,
    UserFamilyCreate,
)
from family_library.services import (
    AlreadyMemberError,
    BookshelfNotEmptyError,
    BookStatusConflictError,
    BookUnavailableError,
    InvalidShelfPositionError,
    LendingAlreadyReturnedError,
    LibraryError,
    MembershipNotFoundError,
    NotFoundError,
    ReadingAlreadyCompletedError,
    activity_service,
    auth_service,
    book_service,
    bookshelf_service,
    family_service,
    lending_service,
    reading_service,
    user_service,
)
from family_library.services.exceptions import DuplicateUsernameError
from family_library.storage.base import utcnow


def lend(household, **fields):
    return lending_service.lend_book(
        household["storage"],
        BookLendingCreate(
            book_id=household["book"].id,
            lender_id=household["alice"].id,
            borrower_id=household["bob"].id,
            **fields,
        ),
    )


def activity_types(storage, user_id):
    """(type, action) pairs for the user, newest first."""
    return [
        (a.activity_type, (a.data or {}).get("action"))
        for a in storage.get_activities_by_user(user_id)
    ]


class TestUserService:
    def test_create_user_hashes_password(self, storage):
        user = user_service.create_user(
            storage, UserCreate(username="dora", password="supersecret", display_name="Dora")
        )

        assert user.password != "supersecret"
        assert verify_password("supersecret", user.password)

    def test_username_is_unique_ignoring_case(self, household):
        with pytest.raises(DuplicateUsernameError) as exc_info:
            user_service.create_user(
                household["storage"],
                UserCreate(username="Alice", password="supersecret", display_name="Other"),
            )

        assert exc_info.value.status_code == 409

    def test_authenticate(self, household):
        storage = household["storage"]

        assert user_service.authenticate_user(storage, "alice", "testpassword123").id == 1
        assert user_service.authenticate_user(storage, "alice", "wrong") is None
        assert user_service.authenticate_user(storage, "ghost", "testpassword123") is None

    def test_missing_user(self, storage):
        with pytest.raises(NotFoundError) as exc_info:
            user_service.get_user(storage, 42)

        assert exc_info.value.status_code == 404
        assert "User 42" in exc_info.value.message


class TestAuthService:
    def test_login_marks_user_online(self, household):
        storage = household["storage"]

        token = auth_service.login(storage, "alice", "testpassword123")

        assert token.access_token
        assert token.user.username == "alice"
        assert storage.get_user(household["alice"].id).is_online is True

    def test_login_with_bad_password(self, household):
        assert auth_service.login(household["storage"], "alice", "nope") is None

    def test_logout_marks_user_offline(self, household):
        storage = household["storage"]
        auth_service.login(storage, "alice", "testpassword123")

        auth_service.logout(storage, household["alice"])

        assert storage.get_user(household["alice"].id).is_online is False


class TestFamilyService:
    def test_creator_joins_new_family(self, household):
        storage = household["storage"]

        family = family_service.create_family(
            storage, FamilyCreate(name="Cousins"), creator_id=household["bob"].id
        )

        assert [u.id for u in family_service.get_members(storage, family.id)] == [
            household["bob"].id
        ]

    def test_duplicate_membership_is_rejected(self, household):
        with pytest.raises(AlreadyMemberError):
            family_service.add_member(
                household["storage"],
                UserFamilyCreate(user_id=household["alice"].id, family_id=household["family"].id),
            )

    def test_membership_needs_existing_family(self, household):
        with pytest.raises(NotFoundError):
            family_service.add_member(
                household["storage"], UserFamilyCreate(user_id=household["alice"].id, family_id=99)
            )

    def test_remove_member(self, household):
        storage = household["storage"]
        family_service.remove_member(storage, household["family"].id, household["bob"].id)

        with pytest.raises(MembershipNotFoundError) as exc_info:
            family_service.remove_member(storage, household["family"].id, household["bob"].id)

        assert exc_info.value.status_code == 404


class TestBookshelfService:
    def test_owner_must_exist(self, household):
        with pytest.raises(NotFoundError):
            bookshelf_service.create_bookshelf(
                household["storage"],
                BookshelfCreate(name="X", family_id=household["family"].id, user_id=99),
            )

    def test_cannot_shrink_below_occupied_row(self, household):
        storage = household["storage"]
        storage.update_book(
            household["book"].id, BookUpdate(shelf_position={"shelf": 1, "position": 0})
        )

        with pytest.raises(InvalidShelfPositionError):
            bookshelf_service.update_bookshelf(
                storage, household["bookshelf"].id, BookshelfUpdate(num_shelves=1)
            )

    def test_can_shrink_to_free_rows(self, household):
        updated = bookshelf_service.update_bookshelf(
            household["storage"], household["bookshelf"].id, BookshelfUpdate(num_shelves=1)
        )

        assert updated.num_shelves == 1

    def test_non_empty_bookshelf_cannot_be_deleted(self, household):
        with pytest.raises(BookshelfNotEmptyError) as exc_info:
            bookshelf_service.delete_bookshelf(household["storage"], household["bookshelf"].id)

        assert exc_info.value.status_code == 409

    def test_owner_filter_sees_private_shelves(self, household):
        storage = household["storage"]
        private = storage.create_bookshelf(
            BookshelfCreate(
                name="Mine",
                family_id=household["family"].id,
                user_id=household["bob"].id,
                is_private=True,
            )
        )

        family_view = bookshelf_service.list_bookshelves(storage, family_id=household["family"].id)
        owner_view = bookshelf_service.list_bookshelves(storage, user_id=household["bob"].id)

        assert private.id not in {b.id for b in family_view}
        assert [b.id for b in owner_view] == [private.id]


class TestBookService:
    def book_data(self, household, **overrides):
        fields = {
            "title": "Dream of the Red Chamber",
            "author": "Cao Xueqin",
            "added_by_id": household["bob"].id,
            "bookshelf_id": household["bookshelf"].id,
            "shelf_position": {"shelf": 1, "position": 0},
        }
        fields.update(overrides)
        return BookCreate(**fields)

    def test_add_book_records_activity(self, household):
        storage = household["storage"]

        book = book_service.add_book(storage, self.book_data(household))

        latest = storage.get_all_activities(1)[0]
        assert latest.activity_type == "add"
        assert latest.book_id == book.id
        assert latest.user_id == household["bob"].id

    def test_shelf_must_exist_on_bookshelf(self, household):
        """Should reject a row beyond num_shelves."""
        with pytest.raises(InvalidShelfPositionError) as exc_info:
            book_service.add_book(
                household["storage"],
                self.book_data(household, shelf_position={"shelf": 2, "position": 0}),
            )

        assert exc_info.value.status_code == 400

    def test_unknown_bookshelf(self, household):
        with pytest.raises(NotFoundError):
            book_service.add_book(household["storage"], self.book_data(household, bookshelf_id=99))

    def test_moving_a_book_rechecks_position(self, household):
        storage = household["storage"]
        small = storage.create_bookshelf(
            BookshelfCreate(
                name="Small",
                family_id=household["family"].id,
                user_id=household["alice"].id,
                num_shelves=1,
            )
        )
        storage.update_book(
            household["book"].id, BookUpdate(shelf_position={"shelf": 1, "position": 0})
        )

        with pytest.raises(InvalidShelfPositionError):
            book_service.update_book(storage, household["book"].id, BookUpdate(bookshelf_id=small.id))

        moved = book_service.update_book(
            storage,
            household["book"].id,
            BookUpdate(bookshelf_id=small.id, shelf_position={"shelf": 0, "position": 3}),
        )
        assert moved.bookshelf_id == small.id

    def test_list_books_with_query_and_shelf(self, household):
        storage = household["storage"]

        assert book_service.list_books(storage, q="liu") == [household["book"]]
        assert book_service.list_books(storage, bookshelf_id=99, q="liu") == []
        assert book_service.search_books(storage, "  three-body ") == [household["book"]]

    def test_status_change_must_agree_with_open_loan(self, household):
        """Should not let a lent book be marked available again."""
        storage = household["storage"]
        lend(household)

        with pytest.raises(BookStatusConflictError) as exc_info:
            book_service.update_book(
                storage, household["book"].id, BookUpdate(status="available")
            )

        assert exc_info.value.status_code == 409
        assert storage.get_book(household["book"].id).status == "borrowed"
        with pytest.raises(BookUnavailableError):
            lend(household)
        assert len(storage.get_book_lendings_by_book(household["book"].id)) == 1

    def test_status_change_matching_open_sessions_is_allowed(self, household):
        storage = household["storage"]
        storage.create_reading_history(
            ReadingHistoryCreate(user_id=household["bob"].id, book_id=household["book"].id)
        )

        with pytest.raises(BookStatusConflictError):
            book_service.update_book(storage, household["book"].id, BookUpdate(status="borrowed"))

        updated = book_service.update_book(
            storage, household["book"].id, BookUpdate(status="reading")
        )
        assert updated.status == "reading"

    def test_blank_search_matches_nothing(self, household):
        storage = household["storage"]

        assert book_service.search_books(storage, "   ") == []
        assert book_service.list_books(storage, q="   ") == []


class TestLendingService:
    def test_lend_marks_book_borrowed(self, household):
        storage = household["storage"]

        lending = lend(household)

        assert lending.status == "borrowed"
        assert storage.get_book(household["book"].id).status == "borrowed"
        assert activity_types(storage, household["bob"].id)[0] == ("borrow", "borrowed_book")

    def test_default_due_date(self, household):
        lending = lend(household)

        assert lending.due_date - lending.lend_date >= timedelta(days=13)

    def test_explicit_due_date_is_kept(self, household):
        due = utcnow() + timedelta(days=3)

        assert lend(household, due_date=due).due_date == due

    def test_unavailable_book_cannot_be_lent(self, household):
        lend(household)

        with pytest.raises(BookUnavailableError) as exc_info:
            lend(household)

        assert exc_info.value.status_code == 409

    def test_borrower_must_exist(self, household):
        with pytest.raises(NotFoundError):
            lending_service.lend_book(
                household["storage"],
                BookLendingCreate(
                    book_id=household["book"].id, lender_id=household["alice"].id, borrower_id=99
                ),
            )

    def test_return_releases_book(self, household):
        storage = household["storage"]
        lending = lend(household)

        returned = lending_service.return_book(storage, lending.id)

        assert returned.status == "returned"
        assert returned.return_date is not None
        assert storage.get_book(household["book"].id).status == "available"
        assert activity_types(storage, household["bob"].id)[0] == ("return", "returned_book")

    def test_second_return_is_rejected(self, household):
        storage = household["storage"]
        lending = lend(household)
        lending_service.return_book(storage, lending.id)

        with pytest.raises(LendingAlreadyReturnedError):
            lending_service.return_book(storage, lending.id)

    def test_list_lendings_combines_filters(self, household):
        storage = household["storage"]
        lending = lend(household)

        assert lending_service.list_lendings(
            storage, lender_id=household["alice"].id, borrower_id=household["bob"].id
        ) == [lending]
        assert lending_service.list_lendings(
            storage, lender_id=household["bob"].id, book_id=household["book"].id
        ) == []


class TestReadingService:
    def start(self, household, user=None):
        return reading_service.start_reading(
            household["storage"],
            ReadingHistoryCreate(
                user_id=(user or household["alice"]).id, book_id=household["book"].id
            ),
        )

    def test_start_marks_available_book_reading(self, household):
        storage = household["storage"]

        self.start(household)

        assert storage.get_book(household["book"].id).status == "reading"
        assert activity_types(storage, household["alice"].id)[0] == ("read", "started_reading")

    def test_start_leaves_borrowed_book_borrowed(self, household):
        storage = household["storage"]
        lend(household)

        self.start(household, household["bob"])

        assert storage.get_book(household["book"].id).status == "borrowed"

    def test_complete_frees_book(self, household):
        storage = household["storage"]
        history = self.start(household)

        completed = reading_service.complete_reading(
            storage, history.id, ReadingHistoryComplete(rating=4, notes="great")
        )

        assert completed.end_date is not None
        assert completed.rating == 4
        assert storage.get_book(household["book"].id).status == "available"
        assert activity_types(storage, household["alice"].id)[:2] == [
            ("rate", "rated_book"),
            ("read", "finished_reading"),
        ]

    def test_complete_without_rating_records_no_rate_activity(self, household):
        storage = household["storage"]
        history = self.start(household)

        reading_service.complete_reading(storage, history.id, ReadingHistoryComplete())

        types = [a.activity_type for a in storage.get_activities_by_user(household["alice"].id)]
        assert "rate" not in types

    def test_other_open_session_keeps_book_reading(self, household):
        storage = household["storage"]
        first = self.start(household)
        self.start(household, household["bob"])

        reading_service.complete_reading(storage, first.id, ReadingHistoryComplete())

        assert storage.get_book(household["book"].id).status == "reading"

    def test_completing_twice_is_rejected(self, household):
        storage = household["storage"]
        history = self.start(household)
        reading_service.complete_reading(storage, history.id, ReadingHistoryComplete())

        with pytest.raises(ReadingAlreadyCompletedError):
            reading_service.complete_reading(storage, history.id, ReadingHistoryComplete())

    def test_end_before_start_is_rejected(self, household):
        storage = household["storage"]
        history = self.start(household)

        with pytest.raises(LibraryError):
            reading_service.complete_reading(
                storage,
                history.id,
                ReadingHistoryComplete(end_date=history.start_date - timedelta(days=1)),
            )


class TestActivityService:
    def test_record_activity_checks_references(self, household):
        with pytest.raises(NotFoundError):
            activity_service.record_activity(
                household["storage"],
                ActivityCreate(user_id=99, activity_type="add", book_id=household["book"].id),
            )

    def test_family_filter(self, household):
        storage = household["storage"]
        activity_service.record(storage, household["alice"].id, "add", household["book"].id)

        listed = activity_service.list_activities(storage, family_id=household["family"].id)

        assert len(listed) == 1
        assert activity_service.list_activities(storage, family_id=99) == []

    def test_extra_data_is_stored(self, household):
        activity = activity_service.record(
            household["storage"], household["alice"].id, "rate", household["book"].id, rating=5
        )

        assert activity.data == {"rating": 5}


class TestZhangFamilyWalkthrough:
    """A lending round trip driven through the services."""

    def test_services_keep_status_in_step(self, household):
        storage = household["storage"]
        book_id = household["book"].id

        lending = lend(household, due_date=utcnow() + timedelta(days=14))
        assert storage.get_book(book_id).status == "borrowed"

        lending_service.return_book(storage, lending.id)
        assert storage.get_book(book_id).status == "available"

        history = reading_service.start_reading(
            storage, ReadingHistoryCreate(user_id=household["bob"].id, book_id=book_id)
        )
        assert storage.get_book(book_id).status == "reading"

        reading_service.complete_reading(storage, history.id, ReadingHistoryComplete(rating=5))
        assert storage.get_book(book_id).status == "available"
