"""Unit test configuration.

Unit tests never touch PostgreSQL or Azure OpenAI: repositories are replaced
through dependency overrides and asyncpg/httpx are mocked.
"""

import pytest


pytestmark = pytest.mark.unit
