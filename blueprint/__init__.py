"""Blueprint -- scaffold Fastify + TypeScript backend services from templates."""

__version__ = "1.0.0"
