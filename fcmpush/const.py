# fcmpush/const.py
"""Constants for the FCM push client."""

from __future__ import annotations

from typing import Final

# Send endpoints
DEFAULT_API_URL: Final = "https://fcm.googleapis.com/fcm/send"
FCM_V1_URL_PREFIX: Final = "https://fcm.googleapis.com/v1/projects/"
FCM_V1_URL_SUFFIX: Final = "/messages:send"

# Instance ID topic management
DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL: Final = "https://iid.googleapis.com/iid/v1:batchAdd"
DEFAULT_TOPIC_REMOVE_SUBSCRIPTION_API_URL: Final = (
    "https://iid.googleapis.com/iid/v1:batchRemove"
)

# OAuth2 service-account flow
TOKEN_URL: Final = "https://www.googleapis.com/oauth2/v4/token"
FCM_SCOPE: Final = "https://www.googleapis.com/auth/firebase.messaging"
JWT_BEARER_GRANT_TYPE: Final = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_S: Final = 3600
ACCESS_TOKEN_LIFETIME_S: Final = 3600

# Transport
DEFAULT_TIMEOUT_S: Final = 30.0
CONTENT_TYPE_JSON: Final = "application/json"
CONTENT_TYPE_FORM: Final = "application/x-www-form-urlencoded"

# Ephemeral relay topics: Topic_<unix seconds>_<4 digits>
EPHEMERAL_TOPIC_PREFIX: Final = "Topic"
EPHEMERAL_TOPIC_SUFFIX_MIN: Final = 1000
EPHEMERAL_TOPIC_SUFFIX_MAX: Final = 9999

TOPIC_PATH_PREFIX: Final = "/topics/"

# Message priorities
PRIORITY_NORMAL: Final = "normal"
PRIORITY_HIGH: Final = "high"
PRIORITIES: Final = (PRIORITY_NORMAL, PRIORITY_HIGH)

# Config mapping keys
CONF_API_KEY: Final = "api_key"
CONF_ACCESS_TOKEN: Final = "access_token"
CONF_PROJECT_ID: Final = "project_id"
CONF_PROXY_URL: Final = "proxy_url"
CONF_STRATEGY: Final = "strategy"
CONF_TIMEOUT: Final = "timeout"
CONF_LOG_DEBUG_VERBOSE: Final = "log_debug_verbose"

__all__ = [
    "ACCESS_TOKEN_LIFETIME_S",
    "ASSERTION_LIFETIME_S",
    "CONF_ACCESS_TOKEN",
    "CONF_API_KEY",
    "CONF_LOG_DEBUG_VERBOSE",
    "CONF_PROJECT_ID",
    "CONF_PROXY_URL",
    "CONF_STRATEGY",
    "CONF_TIMEOUT",
    "CONTENT_TYPE_FORM",
    "CONTENT_TYPE_JSON",
    "DEFAULT_API_URL",
    "DEFAULT_TIMEOUT_S",
    "DEFAULT_TOPIC_ADD_SUBSCRIPTION_API_URL",
    "DEFAULT_TOPIC_REMOVE_SUBSCRIPTION_API_URL",
    "EPHEMERAL_TOPIC_PREFIX",
    "EPHEMERAL_TOPIC_SUFFIX_MAX",
    "EPHEMERAL_TOPIC_SUFFIX_MIN",
    "FCM_SCOPE",
    "FCM_V1_URL_PREFIX",
    "FCM_V1_URL_SUFFIX",
    "JWT_BEARER_GRANT_TYPE",
    "PRIORITIES",
    "PRIORITY_HIGH",
    "PRIORITY_NORMAL",
    "TOKEN_URL",
    "TOPIC_PATH_PREFIX",
]
