# backend -- M-etod Hub: FastAPI server + SQL content store
#
# Modules:
#   app        -- FastAPI application with lifespan management
#   config     -- environment settings (.env)
#   database   -- PostgreSQL / SQLite async engine
#   models     -- SQLAlchemy ORM models (categories, offers, articles, news, forum, rates, users)
#   store      -- generic per-collection CRUD
#   schemas    -- Pydantic request/response schemas
#   errors     -- error taxonomy mapped to HTTP responses
#   auth       -- accounts, sessions, admin gate
#   services/  -- domain operations
#   assist/    -- LLM generation and page scraping
#   routes/    -- API endpoints
#   utils/     -- slug, rendering and search helpers
