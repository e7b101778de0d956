# backend/weddinglens/models/catalog.py
"""
Catalog models: photographers and what can be booked with them.

These rows are reference data loaded from the seed YAML. Nothing in the
booking or payment flow writes to them.
"""

from sqlalchemy import JSON, Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from ..database import Base


class Photographer(Base):
    __tablename__ = "photographers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    bio = Column(Text, nullable=False, default="")
    profile_image = Column(String(500), nullable=True)
    specialties = Column(JSON, nullable=False, default=list)
    experience = Column(Integer, nullable=False, default=0)  # years
    location = Column(String(120), nullable=False)

    portfolio_items = relationship(
        "PortfolioItem", back_populates="photographer", order_by="PortfolioItem.id"
    )
    testimonials = relationship(
        "Testimonial", back_populates="photographer", order_by="Testimonial.id"
    )

    def __repr__(self) -> str:
        return f"<Photographer {self.id}: {self.name}>"


class ServiceCategory(Base):
    __tablename__ = "service_categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    image_url = Column(String(500), nullable=True)

    services = relationship("Service", back_populates="category", order_by="Service.id")


class Service(Base):
    """A bookable unit of work (a shoot, a film, drone coverage)."""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=False, default="")
    category_id = Column(Integer, ForeignKey("service_categories.id"), nullable=False, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    duration_hours = Column(Integer, nullable=False, default=1)
    image_url = Column(String(500), nullable=True)

    category = relationship("ServiceCategory", back_populates="services")


class Package(Base):
    """A fixed-price bundle of services."""

    __tablename__ = "packages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(80), nullable=False, unique=True)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(12, 2), nullable=False)
    service_ids = Column(JSON, nullable=False, default=list)
    image_url = Column(String(500), nullable=True)
    features = Column(JSON, nullable=False, default=list)
    popular = Column(Boolean, nullable=False, default=False)


class PortfolioItem(Base):
    __tablename__ = "portfolio_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    photographer_id = Column(Integer, ForeignKey("photographers.id"), nullable=False, index=True)
    image_url = Column(String(500), nullable=False)
    title = Column(String(120), nullable=False)
    category = Column(String(40), nullable=False)
    description = Column(Text, nullable=True)

    photographer = relationship("Photographer", back_populates="portfolio_items")


class Testimonial(Base):
    __tablename__ = "testimonials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    photographer_id = Column(Integer, ForeignKey("photographers.id"), nullable=False, index=True)
    client_name = Column(String(120), nullable=False)
    client_image = Column(String(500), nullable=True)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    event_type = Column(String(40), nullable=False)

    photographer = relationship("Photographer", back_populates="testimonials")
