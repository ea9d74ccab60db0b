"""
Demo household used for local development and the init-sample-data endpoint.

Everything goes through the public Storage methods, so the same data loads
into any backend.
"""

from datetime import timedelta
from typing import TYPE_CHECKING

from family_library.core.security import get_password_hash
from family_library.schemas import (
    ActivityCreate,
    BookCreate,
    BookLendingCreate,
    BookshelfCreate,
    FamilyCreate,
    ReadingHistoryCreate,
    UserCreate,
    UserFamilyCreate,
)
from family_library.storage.base import utcnow

if TYPE_CHECKING:
    from family_library.storage.base import Storage

SAMPLE_PASSWORD = "password"

SAMPLE_USERS = [
    {
        "username": "jiahao",
        "display_name": "张家豪",
        "avatar": "https://images.unsplash.com/photo-1601288496920-b6154fe3626a?auto=format&fit=crop&w=150&h=150",
    },
    {
        "username": "lina",
        "display_name": "张丽娜",
        "avatar": "https://images.unsplash.com/photo-1544005313-94ddf0286df2?auto=format&fit=crop&w=150&h=150",
    },
    {
        "username": "wei",
        "display_name": "张伟",
        "avatar": "https://images.unsplash.com/photo-1506794778202-cad84cf45f1d?auto=format&fit=crop&w=150&h=150",
    },
    {
        "username": "xiaoming",
        "display_name": "小明",
        "avatar": None,
    },
]

# (title, author, isbn, category, added_by, shelf, position, status, description)
SAMPLE_BOOKS = [
    ("三体", "刘慈欣", "9787536692978", "科幻", "jiahao", 0, 0, "available",
     "地球文明向宇宙发出的第一声啼鸣，以及以此为开端，地球文明与三体文明间的复杂信息战。"),
    ("活着", "余华", "9787506365437", "小说", "jiahao", 0, 1, "borrowed",
     "《活着》是余华的代表作，讲述了农村人福贵悲惨的人生遭遇。"),
    ("平凡的世界", "路遥", "9787530216781", "文学", "jiahao", 0, 2, "available",
     "《平凡的世界》是一部全景式地表现中国当代城乡社会生活的长篇小说。"),
    ("围城", "钱钟书", "9787020090006", "文学", "wei", 0, 3, "reading",
     "《围城》是钱钟书所著的长篇小说，被誉为中国现代文学史上的经典。"),
    ("解忧杂货店", "东野圭吾", "9787544270878", "小说", "lina", 0, 4, "available",
     "讲述了在一家可以咨询烦恼的杂货店，对来信者的回答会发生奇妙的效果。"),
    ("追风筝的人", "卡勒德·胡赛尼", "9787208061644", "小说", "wei", 1, 0, "available",
     "《追风筝的人》是阿富汗裔美国作家卡勒德·胡赛尼的成名作。"),
    ("红楼梦", "曹雪芹", "9787020002207", "文学", "jiahao", 1, 1, "available",
     "《红楼梦》是一部中国古典长篇小说，被誉为中国古典小说的巅峰之作。"),
    ("百年孤独", "加西亚·马尔克斯", "9787544253994", "文学", "jiahao", 1, 2, "available",
     "《百年孤独》是哥伦比亚作家加西亚·马尔克斯的代表作，也是魔幻现实主义文学的代表作之一。"),
    ("月亮与六便士", "毛姆", "9787532731077", "小说", "lina", 1, 3, "available",
     "《月亮与六便士》是英国小说家威廉·萨默塞特·毛姆的代表作之一。"),
]


def load_sample_data(storage: "Storage") -> None:
    """Create the 张家 household: four members, two bookshelves, nine books."""
    family = storage.create_family(FamilyCreate(name="张家"))

    password_hash = get_password_hash(SAMPLE_PASSWORD)
    users = {}
    for user_data in SAMPLE_USERS:
        user = storage.create_user(UserCreate(password=password_hash, **user_data))
        storage.add_user_to_family(UserFamilyCreate(user_id=user.id, family_id=family.id))
        users[user.username] = user

    storage.update_user_online_status(users["jiahao"].id, True)

    family_shelf = storage.create_bookshelf(
        BookshelfCreate(
            name="家庭书架",
            family_id=family.id,
            user_id=users["jiahao"].id,
            num_shelves=2,
            is_private=False,
        )
    )
    storage.create_bookshelf(
        BookshelfCreate(
            name="家豪的书架",
            family_id=family.id,
            user_id=users["jiahao"].id,
            num_shelves=1,
            is_private=True,
        )
    )

    books = {}
    for title, author, isbn, category, added_by, shelf, position, status, description in SAMPLE_BOOKS:
        books[title] = storage.create_book(
            BookCreate(
                title=title,
                author=author,
                isbn=isbn,
                category=category,
                description=description,
                added_by_id=users[added_by].id,
                bookshelf_id=family_shelf.id,
                shelf_position={"shelf": shelf, "position": position},
                status=status,
            )
        )

    now = utcnow()
    storage.create_book_lending(
        BookLendingCreate(
            book_id=books["活着"].id,
            lender_id=users["wei"].id,
            borrower_id=users["xiaoming"].id,
            due_date=now + timedelta(days=14),
        )
    )

    storage.create_reading_history(
        ReadingHistoryCreate(user_id=users["lina"].id, book_id=books["三体"].id, start_date=now)
    )
    storage.create_reading_history(
        ReadingHistoryCreate(
            user_id=users["wei"].id,
            book_id=books["围城"].id,
            start_date=now - timedelta(days=5),
        )
    )

    feed = [
        ("lina", "read", "三体", None, {"action": "started_reading"}),
        ("xiaoming", "borrow", "活着", "wei", {"action": "borrowed_book"}),
        ("jiahao", "add", "平凡的世界", None, {"action": "added_book"}),
        ("wei", "rate", "围城", None, {"action": "rated_book", "rating": 5}),
        ("lina", "return", "解忧杂货店", "jiahao", {"action": "returned_book"}),
    ]
    for actor, activity_type, title, related, data in feed:
        storage.create_activity(
            ActivityCreate(
                user_id=users[actor].id,
                activity_type=activity_type,
                book_id=books[title].id,
                related_user_id=users[related].id if related else None,
                data=data,
            )
        )
