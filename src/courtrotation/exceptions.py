"""Exceptions for use in Court Rotation"""

# Court Rotation
# Copyright (C) 2025  Court Rotation developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.


# ========== Base Application Exception ==========


class CourtRotationException(Exception):
    """Base exception for all Court Rotation errors.

    All custom exceptions in the application inherit from this class, so a
    caller can catch every application-specific error with one except clause.
    """

    pass


# ========== Roster Exceptions ==========


class RosterException(CourtRotationException):
    """Base exception for roster-related errors."""

    pass


class PlayerNotFoundException(RosterException):
    """Raised when a requested player id is not on the roster."""

    pass


class DuplicatePlayerException(RosterException):
    """Raised when adding a player whose id is already on the roster."""

    pass


class InvalidFixedPartnerException(RosterException):
    """Raised when a fixed partnership cannot be formed (self or unknown partner)."""

    pass


class InvalidLevelException(RosterException):
    """Raised when a level tag is not one of the six known patterns."""

    pass


# ========== Scheduling Exceptions ==========


class SchedulingException(CourtRotationException):
    """Base exception for court scheduling errors."""

    pass


class CourtNotFoundException(SchedulingException):
    """Raised when a court id does not exist in the session."""

    pass


class CourtOccupiedException(SchedulingException):
    """Raised when assigning a match to a court that already holds one."""

    pass


class InvalidMatchException(SchedulingException):
    """Raised when a match does not hold four distinct players."""

    pass


class PlanAheadActiveException(SchedulingException):
    """Raised when filling a single court while the next batch is planned ahead."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(CourtRotationException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid (e.g., court count out of range)."""

    pass


# ========== Persistence Exceptions ==========


class PersistenceException(CourtRotationException):
    """Base exception for saving and loading session data."""

    pass


class SchemaVersionException(PersistenceException):
    """Raised when saved data carries a schema version this build cannot read."""

    pass


class MalformedSessionException(PersistenceException):
    """Raised when saved data does not have the expected shape."""

    pass


# ========== Console Exceptions ==========


class CommandUsageException(CourtRotationException):
    """Raised when a console command is given the wrong arguments."""

    pass
