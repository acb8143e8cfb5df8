import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from mockupdesk.database import Base
from mockupdesk.models import (
    Agency,
    AgencyMembership,
    Brand,
    Media,
    MediaStatus,
    MediaType,
    Post,
    PostMedia,
    PostStatus,
    User,
    UserRole,
)
from mockupdesk.services.access import Actor
from mockupdesk.services.notifications import NotificationSink

TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(autouse=True)
def db_session() -> Session:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def notifier(db_session: Session) -> NotificationSink:
    return NotificationSink(db_session)


def make_agency(session: Session, name: str = "Acme Social") -> Agency:
    agency = Agency(name=name, slug=name.lower().replace(" ", "-"))
    session.add(agency)
    session.commit()
    return agency


def make_brand(session: Session, agency: Agency, name: str = "Coffee Co", default_reviewers=None) -> Brand:
    brand = Brand(
        agency_id=agency.id,
        name=name,
        slug=name.lower().replace(" ", "-"),
        profile_name=name.lower().replace(" ", ""),
        default_reviewers=default_reviewers,
    )
    session.add(brand)
    session.commit()
    return brand


def make_user(
    session: Session,
    agency: Agency,
    email: str,
    role: UserRole = UserRole.CREATOR,
    brands=(),
    name: str = None,
) -> User:
    user = User(
        agency_id=agency.id,
        name=name or email.split("@")[0].title(),
        email=email,
        role=role,
    )
    user.brands = list(brands)
    session.add(user)
    session.flush()
    session.add(AgencyMembership(agency_id=agency.id, user_id=user.id, role=role.value))
    session.commit()
    return user


def actor_for(session: Session, user: User) -> Actor:
    session.refresh(user)
    return Actor.from_user(user)


def make_media(session: Session, brand: Brand, uploader: User, status: MediaStatus = MediaStatus.READY) -> Media:
    media = Media(
        brand_id=brand.id,
        user_id=uploader.id,
        type=MediaType.IMAGE,
        original_filename="launch.jpg",
        path=f"media/{brand.id}/launch.jpg",
        mime_type="image/jpeg",
        size=204800,
        width=1080,
        height=1080,
        thumbnails={"medium": f"media/{brand.id}/launch_medium.jpg"},
        status=status,
    )
    session.add(media)
    session.commit()
    return media


def make_post(
    session: Session,
    brand: Brand,
    creator: User,
    title: str = "Spring launch",
    status: PostStatus = PostStatus.DRAFT,
    collection=None,
    media=(),
) -> Post:
    post = Post(
        brand_id=brand.id,
        created_by_id=creator.id,
        title=title,
        caption="New season, new blend.",
        platforms=["instagram_feed"],
        status=status,
        collection_id=collection.id if collection else None,
    )
    session.add(post)
    session.flush()
    for position, item in enumerate(media):
        session.add(PostMedia(post_id=post.id, media_id=item.id, position=position))
    session.commit()
    return post


@pytest.fixture
def workspace(db_session: Session):
    """One agency, one brand, and a user for every role."""
    agency = make_agency(db_session)
    brand = make_brand(db_session, agency, default_reviewers=["client@coffee.example"])
    creator = make_user(db_session, agency, "creator@acme.example", UserRole.CREATOR, brands=[brand])
    reviewer = make_user(db_session, agency, "reviewer@acme.example", UserRole.REVIEWER, brands=[brand])
    manager = make_user(db_session, agency, "manager@acme.example", UserRole.MANAGER)
    return {
        "agency": agency,
        "brand": brand,
        "creator": creator,
        "reviewer": reviewer,
        "manager": manager,
    }
