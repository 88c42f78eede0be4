"""Application configuration settings.

This module defines the ``Settings`` class using ``pydantic-settings`` to
load configuration from environment variables. It centralises all
runtime configuration for the application, such as the list of planning
resources to poll, the feed URL, refresh cadence and the room name filter.
"""

import os
from typing import List

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Load environment variables from a .env file if present. Variables already
# set in the process environment take precedence.
load_dotenv(os.getenv("ROOM_AVAILABILITY_ENV", ".env"))

DEFAULT_RESOURCES: List[int] = [
    726, 1508, 730, 1649, 731, 1680, 706, 1698, 733, 1715,
    707, 5805, 3400, 3403, 3404, 7957, 7958, 4816, 7834, 7835,
    4501, 4722, 4624, 3395, 4727, 1037, 1981, 3584, 1884, 3586,
    1803, 3582, 1274, 3587, 3402, 1290, 2016, 3513, 3543, 3542,
    3538, 3535, 3532, 3530, 3527, 3525, 3487, 3486, 3484, 3483,
    3479, 3478, 4294, 4296, 6345, 6927, 6932, 6974, 5252, 4226,
    3508, 3510, 5877, 3577, 3997, 4209, 1849, 1359, 6791, 6800,
    1890, 6787, 6789, 2876, 3467, 3466, 3464, 3463, 3461, 3460,
    3458, 3457, 3453, 3454, 3450, 3451, 3447, 3448, 1299, 1189,
    3492, 3493, 3438, 3436, 3433, 3431, 3429, 3428, 3426, 3425,
    3387, 3585, 3580, 71, 2883, 2902, 2808, 2811, 2814, 2836,
    3421, 3420, 3412, 3411, 3415, 3414, 3418, 3417,
]

DEFAULT_FEED_URL_TEMPLATE = (
    "https://planning.univ-ubs.fr/jsp/custom/modules/plannings/anonymous_cal.jsp"
    "?resources={resource}&projectId=1&calType=ical&firstDate={first_date}&lastDate={last_date}"
)


class Settings(BaseSettings):
    """Configuration values loaded from environment variables.

    Environment variable names map to fields by alias. Every value has a
    default that targets the UBS planning server, so the service starts
    without any environment at all.
    """

    # Feed source
    resources: List[int] = Field(
        default_factory=lambda: list(DEFAULT_RESOURCES),
        alias="RESOURCES",
        description="Planning resource identifiers to poll, as a JSON list.",
    )
    feed_url_template: str = Field(
        default=DEFAULT_FEED_URL_TEMPLATE,
        alias="FEED_URL_TEMPLATE",
        description="Feed URL with {resource}, {first_date} and {last_date} placeholders.",
    )
    fetch_timeout_seconds: float = Field(
        default=5.0,
        alias="FETCH_TIMEOUT_SECONDS",
        description="Network timeout for a single feed download.",
    )

    # Refresh behaviour
    refresh_seconds: int = Field(
        default=3600,
        alias="REFRESH_SECONDS",
        description="Interval (in seconds) between full refresh passes.",
    )
    window_weeks_before: int = Field(
        default=2,
        alias="WINDOW_WEEKS_BEFORE",
        description="How many weeks before today each feed request starts.",
    )
    window_weeks_after: int = Field(
        default=8,
        alias="WINDOW_WEEKS_AFTER",
        description="How many weeks after today each feed request ends.",
    )

    # Queries
    room_name_pattern: str = Field(
        default=r"^\bV-[AB]\s?\d*?\b$",
        alias="ROOM_NAME_PATTERN",
        description="Regular expression selecting which room names the API exposes.",
    )
    service_day_start_hour: int = Field(
        default=8,
        alias="SERVICE_DAY_START_HOUR",
        description="Hour of day at which the 24h 'open today' window begins.",
    )
    service_timezone: str = Field(
        default="UTC",
        alias="SERVICE_TIMEZONE",
        description="IANA timezone used to place the start of the service day.",
    )

    enable_cors: str = Field(default="yes", alias="ENABLE_CORS")

    class Config:
        extra = "ignore"
        populate_by_name = True

    @field_validator("service_day_start_hour")
    @classmethod
    def check_hour(cls, v: int) -> int:
        if not 0 <= v <= 23:
            raise ValueError("SERVICE_DAY_START_HOUR must be between 0 and 23")
        return v

    @property
    def cors_enabled(self) -> bool:
        return self.enable_cors.strip().lower() in {"1", "true", "yes"}


# Instantiate settings at module import time. This allows other modules to
# import ``settings`` directly without repeatedly reading environment variables.
settings = Settings()
