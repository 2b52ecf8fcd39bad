from sqlalchemy import (
    JSON,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
)

metadata = MetaData()

reservations = Table(
    "reservations",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("user_id", String(64)),
    Column("guest_name", String(255), nullable=False),
    Column("guest_email", String(255), nullable=False),
    Column("guest_phone", String(50)),
    Column("nationality", String(8)),
    # Hotel snapshot
    Column("hotel_id", String(128), nullable=False),
    Column("hotel_name", String(255), nullable=False),
    Column("hotel_address", String(500)),
    Column("hotel_city", String(150)),
    Column("hotel_country", String(150)),
    Column("hotel_rating", Float),
    Column("hotel_image", String(1000)),
    Column("match_hash", String(500)),
    # Stay
    Column("check_in", Date, nullable=False),
    Column("check_out", Date, nullable=False),
    Column("number_of_nights", Integer, nullable=False),
    Column("number_of_rooms", Integer, nullable=False, default=1),
    Column("number_of_adults", Integer, nullable=False, default=2),
    Column("room_type", String(255), nullable=False),
    Column("stay_type", String(32)),
    Column("meal", String(64)),
    Column("payment_method", String(32)),
    Column("special_requests", Text),
    Column("guests", JSON),
    # Status
    Column("status", String(32), nullable=False),
    Column("supplier_order_id", String(128)),
    Column("supplier_status", String(32)),
    Column("session_id", String(64)),
    # Financial
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("invoice_id", String(64)),
    Column("notes", JSON),
    Column("lock_version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    Index("ix_reservations_user_id", "user_id"),
    Index("ix_reservations_session_id", "session_id"),
)

invoices = Table(
    "invoices",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("invoice_number", String(64), nullable=False, unique=True),
    Column("reservation_id", String(64), ForeignKey("reservations.id"), nullable=False, unique=True),
    Column("user_id", String(64)),
    Column("client_name", String(255)),
    Column("client_email", String(255)),
    Column("client_phone", String(50)),
    Column("items", JSON, nullable=False),
    Column("subtotal", Numeric(12, 2), nullable=False),
    Column("tax", Numeric(12, 2), nullable=False),
    Column("discount", Numeric(12, 2), nullable=False),
    Column("total", Numeric(12, 2), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("status", String(32), nullable=False),
    Column("due_date", DateTime(timezone=True)),
    Column("created_at", DateTime(timezone=True)),
)

booking_sessions = Table(
    "booking_sessions",
    metadata,
    Column("session_id", String(64), primary_key=True),
    Column("user_id", String(64)),
    Column("hotel_id", String(128), nullable=False),
    Column("check_in", Date, nullable=False),
    Column("check_out", Date, nullable=False),
    Column("guest_email", String(255)),
    Column("created_at", DateTime(timezone=True)),
)

booking_session_items = Table(
    "booking_session_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "session_id",
        String(64),
        ForeignKey("booking_sessions.session_id"),
        nullable=False,
    ),
    Column("position", Integer, nullable=False),
    Column("room_type", String(255), nullable=False),
    Column("order_id", String(128), nullable=False),
    Column("room_count", Integer, nullable=False),
    Column("outcome", String(16), nullable=False),
    Column("reservation_id", String(64)),
    Column("error", Text),
    Index("ix_booking_session_items_session_id", "session_id"),
)
