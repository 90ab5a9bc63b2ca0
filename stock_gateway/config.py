import os

# Inbound listener
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3030))

# ERP SOAP endpoint
UPSTREAM_URL = os.getenv(
    "UPSTREAM_URL",
    "https://br-api.silent-believers.com/soap-generic/syracuse/collaboration/syracuse/CAdxWebServiceXmlCC",
)
UPSTREAM_SOAP_ACTION = "run"
# Session-affinity cookie the upstream load balancer routes on
UPSTREAM_COOKIE = os.getenv(
    "UPSTREAM_COOKIE",
    "client.id=daebf90c-3ce8-4fc4-b872-4434887b6a7d; syracuse.sid.8124=8ab95612-d920-43a5-be6c-9d71d6773d51",
)
UPSTREAM_TIMEOUT_MS = int(os.getenv("UPSTREAM_TIMEOUT_MS", 30000))

# Secondary backend behind /phprequest
RELAY_URL = os.getenv("RELAY_URL", "http://localhost:3001/test.php")
RELAY_TIMEOUT_MS = int(os.getenv("RELAY_TIMEOUT_MS", 10000))

APP_ENV = os.getenv("APP_ENV", os.getenv("NODE_ENV", "production"))
DIAGNOSTIC_MODE = APP_ENV == "development"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
