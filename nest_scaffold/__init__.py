"""nest-scaffold: adds JWT auth, Prisma and response formatting to a NestJS project."""

__version__ = "0.1.0"
