"""Initialize the database with default topics, locations and an admin user."""

from sqlalchemy.orm import Session

from authentication.auth import get_password_hash
from models.config import settings
from repositories.database import DatabaseHandle
from repositories.db_models import Location, LocationType, Topic, User

DEFAULT_TOPICS: list[dict] = [
    {
        "name": "Road Maintenance",
        "description": "Issues related to road repairs, potholes, and general road maintenance.",
    },
    {
        "name": "Traffic Safety",
        "description": "Concerns about traffic safety, including intersections, crosswalks, and speed limits.",
    },
    {
        "name": "Public Transportation",
        "description": "Discussions about public transportation systems, bus routes, and schedules.",
    },
    {
        "name": "Waste Management",
        "description": "Topics related to garbage collection, recycling, and waste disposal.",
    },
    {
        "name": "Parks and Recreation",
        "description": "Discussions about parks, playgrounds, and recreational facilities.",
    },
    {
        "name": "Water Supply",
        "description": "Issues related to water quality, supply, and infrastructure.",
    },
    {
        "name": "Street Lighting",
        "description": "Topics concerning street lights, maintenance, and coverage.",
    },
    {
        "name": "Noise Pollution",
        "description": "Discussions about noise levels, regulations, and enforcement.",
    },
    {
        "name": "Air Quality",
        "description": "Concerns about air pollution, emissions, and air quality monitoring.",
    },
    {
        "name": "Public Safety",
        "description": "Issues related to community safety, crime prevention, and law enforcement.",
    },
    {
        "name": "Housing Development",
        "description": "Topics about housing projects, affordable housing, and development.",
    },
    {
        "name": "Community Events",
        "description": "Discussions about local events, festivals, and community gatherings.",
    },
]

DEFAULT_LOCATIONS: list[dict] = [
    {
        "name": "Central Park",
        "description": "The main park in the downtown area, featuring walking trails and recreational facilities.",
        "type": LocationType.PARK,
    },
    {
        "name": "Downtown District",
        "description": "The central business and commercial area of the city.",
        "type": LocationType.DISTRICT,
    },
    {
        "name": "Riverside Neighborhood",
        "description": "Residential area along the river with parks and walking paths.",
        "type": LocationType.NEIGHBORHOOD,
    },
    {
        "name": "Main Street",
        "description": "The primary commercial street running through downtown.",
        "type": LocationType.STREET,
    },
    {
        "name": "Oakwood Junction",
        "description": "A major intersection connecting several main roads and highways.",
        "type": LocationType.JUNCTION,
    },
    {
        "name": "Industrial Area",
        "description": "Region designated for manufacturing and industrial businesses.",
        "type": LocationType.AREA,
    },
    {
        "name": "Sunset Hills",
        "description": "Residential neighborhood known for its hillside homes and views.",
        "type": LocationType.NEIGHBORHOOD,
    },
    {
        "name": "Memorial Park",
        "description": "Large recreational area with sports fields and picnic areas.",
        "type": LocationType.PARK,
    },
]


def seed_admin(db: Session) -> User | None:
    """Create the admin account from ADMIN_EMAIL/ADMIN_PASSWORD if missing."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_PASSWORD:
        print("[SKIP] ADMIN_EMAIL/ADMIN_PASSWORD not set, no admin user created")
        return None

    email = settings.ADMIN_EMAIL.strip().lower()
    existing_admin = db.query(User).filter(User.email == email).first()
    if existing_admin:
        return existing_admin

    admin = User(
        email=email,
        username="admin",
        name="Administrator",
        hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
        is_admin=True,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    print("[OK] Admin user created")
    print(f"  Email: {email}")
    print("  Password: (from ADMIN_PASSWORD in .env)")
    print("  IMPORTANT: Change this password in production!")
    return admin


def seed_topics_and_locations(db: Session, created_by: int | None = None) -> None:
    """Insert the default topics and locations that do not exist yet."""
    existing_topics = {name for (name,) in db.query(Topic.name).all()}
    new_topics = [
        Topic(**topic, created_by=created_by)
        for topic in DEFAULT_TOPICS
        if topic["name"] not in existing_topics
    ]

    existing_locations = {name for (name,) in db.query(Location.name).all()}
    new_locations = [
        Location(**location, created_by=created_by)
        for location in DEFAULT_LOCATIONS
        if location["name"] not in existing_locations
    ]

    db.add_all(new_topics)
    db.add_all(new_locations)
    db.commit()
    print(f"[OK] {len(new_topics)} topics and {len(new_locations)} locations created")


def init_db(store: DatabaseHandle | None = None) -> None:
    """Initialize the database with default data."""
    store = store or DatabaseHandle.connect(settings.DATABASE_URL)
    store.create_schema()
    db = store.session()

    try:
        admin = seed_admin(db)
        seed_topics_and_locations(db, created_by=admin.id if admin else None)
        print("\n[OK] Database initialization complete!")

    except Exception as e:
        print(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
