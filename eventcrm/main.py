import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from eventcrm.core.config import get_settings
from eventcrm.core.logging import configure_logging
from eventcrm.core.permissions import load_permission_table
from eventcrm.routes import auth, clients, employees, navigation, projects

configure_logging()
logger = logging.getLogger(__name__)

settings = get_settings()

# Pages that own an API router; each must be reachable by some role.
PAGES = (clients.PAGE, projects.PAGE, employees.PAGE)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.permission_table = load_permission_table(settings.permissions_file)
for page in app.state.permission_table.uncovered(PAGES):
    logger.warning("Page %s is not reachable by any role", page)

app.include_router(auth.router)
app.include_router(navigation.router)
app.include_router(clients.router)
app.include_router(projects.router)
app.include_router(employees.router)
