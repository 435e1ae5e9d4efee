"""SQLAlchemy database models."""
from pgvector.sqlalchemy import Vector
from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text, TIMESTAMP
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database.connection import Base

EMBEDDING_DIMENSION = 1536


class Discipline(Base):
    """Top level of the skill taxonomy (e.g. "Trades")."""
    __tablename__ = "disciplines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Discipline(id={self.id}, name={self.name})>"


class Category(Base):
    """Second taxonomy level, contained in a discipline."""
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    discipline_id = Column(Integer, ForeignKey("disciplines.id"), nullable=True)

    discipline = relationship("Discipline", lazy="raise")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


class Subcategory(Base):
    """Third taxonomy level, contained in a category."""
    __tablename__ = "subcategories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)

    category = relationship("Category", lazy="raise")

    def __repr__(self) -> str:
        return f"<Subcategory(id={self.id}, name={self.name})>"


class Skill(Base):
    """Leaf of the skill taxonomy, with its derived group text and embeddings."""
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=True)
    sub_category_id = Column(Integer, ForeignKey("subcategories.id"), nullable=True)
    billing_class = Column(String(1), nullable=True)  # A, B, C or D
    group_text = Column(Text, nullable=True)
    name_embedding = Column(JSONB, nullable=True)  # authoritative copy
    name_embedding_vec = Column(Vector(EMBEDDING_DIMENSION), nullable=True)  # indexed mirror
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())
    updated_at = Column(
        TIMESTAMP,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    sub_category = relationship("Subcategory", lazy="raise")

    def __repr__(self) -> str:
        return f"<Skill(id={self.id}, name={self.name}, billing_class={self.billing_class})>"


class Candidate(Base):
    """Candidate profile; only the fields the matching engine touches are typed here."""
    __tablename__ = "candidates"

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    job_title = Column(String(255), nullable=True)
    primary_skill_id = Column(Integer, ForeignKey("skills.id"), nullable=True)
    experience_years = Column(Numeric(5, 1), nullable=True)
    saudi_experience = Column(Numeric(5, 1), nullable=True)
    location = Column(String(255), nullable=True)
    nationality = Column(String(100), nullable=True)
    billing_class = Column(String(1), nullable=True)
    profile_picture_url = Column(String(1024), nullable=True)
    terms_accepted = Column(Boolean, nullable=False, default=False)

    # Auth/session fields, owned by the authentication layer
    password_hash = Column(String(255), nullable=True)
    salt = Column(String(255), nullable=True)
    password_reset_token = Column(String(255), nullable=True)
    password_reset_expires = Column(TIMESTAMP, nullable=True)
    email_verification_token = Column(String(255), nullable=True)
    email_verification_expires = Column(TIMESTAMP, nullable=True)
    email_verified = Column(Boolean, nullable=False, default=False)
    phone_verified = Column(Boolean, nullable=False, default=False)
    session_id = Column(String(255), nullable=True)

    bio_embedding = Column(JSONB, nullable=True)
    bio_embedding_vec = Column(Vector(EMBEDDING_DIMENSION), nullable=True)
    created_at = Column(TIMESTAMP, server_default=func.current_timestamp())
    updated_at = Column(
        TIMESTAMP,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp()
    )

    primary_skill = relationship("Skill", lazy="raise")

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, job_title={self.job_title}, primary_skill_id={self.primary_skill_id})>"
