"""
Centralized observability utilities for the inventory Lambda handlers.

This module provides the shared AWS Lambda Powertools logger, tracer and metrics
instances used by the handler, logic and data access layers.
"""

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

# Metrics namespace for inventory KPIs
METRICS_NAMESPACE = 'ChemInventory'

# JSON output format; level from LOG_LEVEL, service name from POWERTOOLS_SERVICE_NAME
logger: Logger = Logger()

# Disabled by setting POWERTOOLS_TRACE_DISABLED to "True"
tracer: Tracer = Tracer()

# Dimensioned by service name, set by environment variable "POWERTOOLS_SERVICE_NAME"
metrics = Metrics(namespace=METRICS_NAMESPACE)
