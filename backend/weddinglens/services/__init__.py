"""Business logic for bookings, payments and earnings."""
