"""Shared pytest setup for aerodramus."""

import aerodramus

aerodramus.init('tornado')
