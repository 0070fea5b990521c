"""Static constants shared by the server package."""

PROJECT_NAME = "BidChemz Logistics"
API_V1_STR = "/api/v1"
VERSION = "1.0.0"
SCHEMA_VERSION = "v1"
