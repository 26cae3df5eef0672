"""Constants for the TLS Rotator."""

import os

# Annotation prefix, changing it breaks every existing source secret
ANNOTATION_PREFIX = os.getenv("ROTATOR_ANNOTATION_PREFIX", "rotator.gw.ei.telekom.de")

# Annotations
ANNOTATION_SOURCE = f"{ANNOTATION_PREFIX}/source-secret"
ANNOTATION_DESTINATION_NAME = f"{ANNOTATION_PREFIX}/destination-secret-name"

# Finalizers
FINALIZER = f"{ANNOTATION_PREFIX}/finalizer"

# Field Manager
FIELD_MANAGER = "k8s-tls-rotator"
CONTROLLER_NAME = "k8s-tls-rotator"

# Resource Kinds
KIND_SECRET = "Secret"
SECRET_API_VERSION = "v1"
SECRET_TYPE_TLS = "kubernetes.io/tls"

# Source data keys
SOURCE_CERT_KEY = "tls.crt"
SOURCE_KEY_KEY = "tls.key"

# Target generations, oldest first
GENERATION_PREVIOUS = "prev-tls"
GENERATION_CURRENT = "tls"
GENERATION_NEXT = "next-tls"
GENERATIONS = (GENERATION_PREVIOUS, GENERATION_CURRENT, GENERATION_NEXT)
GENERATION_SUFFIXES = ("crt", "key", "kid")

TARGET_FIELDS = tuple(
    f"{generation}.{suffix}" for generation in GENERATIONS for suffix in GENERATION_SUFFIXES
)

# Event Reasons
EVENT_REASON_TARGET_CREATED = "TargetCreated"
EVENT_REASON_TARGET_ROTATED = "TargetRotated"
EVENT_REASON_TARGET_DETACHED = "TargetDetached"
EVENT_REASON_VALIDATION_FAILED = "ValidationFailed"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"

# Environment variables
ENV_NAMESPACES = "ROTATOR_NAMESPACES"
ENV_RECONCILE_TIMEOUT = "ROTATOR_RECONCILE_TIMEOUT_SECONDS"
ENV_RETRY_DELAY = "ROTATOR_RETRY_DELAY_SECONDS"
ENV_MAX_WORKERS = "ROTATOR_MAX_WORKERS"
ENV_METRICS_PORT = "METRICS_PORT"
ENV_LOG_LEVEL = "LOG_LEVEL"
