"""Constants for the Starlane Operator."""

# API Group
API_GROUP = "starlane.starlane.io"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_STARLANE = "Starlane"
KIND_POSTGRES = "Postgres"
KIND_PROVISIONER = "StarlaneProvisioner"
KIND_RESOURCE = "StarlaneResource"
KIND_PROVISIONING_JOB = "StarlaneProvisioningJob"

# Child Kinds
KIND_PVC = "PersistentVolumeClaim"
KIND_SECRET = "Secret"
KIND_DEPLOYMENT = "Deployment"
KIND_SERVICE = "Service"
KIND_JOB = "Job"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"
DESCRIPTOR_LABELS = ("type", "kind", "vendor", "product", "variant", "version")

# Annotations
# kopf keeps its handler progress under its own prefix so a child-changed
# marker counts as a change of the owner
KOPF_ANNOTATION_PREFIX = f"kopf.{API_GROUP}"
ANNOTATION_CHILD_CHANGED = f"{API_GROUP}/child-changed"

# Field Manager
FIELD_MANAGER = "starlane-operator"

# Credentials
PASSWORD_KEY = "password"

# Lifecycle stages (status.lifecycleStage)
STAGE_UNSET = ""
STAGE_CREATING = "Creating"
STAGE_READY = "Ready"
STAGE_FAILED = "Failed"

# Condition Types
COND_READY = "Ready"
COND_PROVISIONER_NOT_FOUND = "ProvisionerNotFound"
COND_JOB_FAILED = "JobFailed"

# Event Reasons
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_CHILD_CREATED = "ChildCreated"
EVENT_REASON_CHILD_UPDATED = "ChildUpdated"
EVENT_REASON_LABELED = "Labeled"
EVENT_REASON_DESCRIPTOR_INVALID = "DescriptorInvalid"
EVENT_REASON_PROVISIONING_STARTED = "ProvisioningStarted"
EVENT_REASON_PROVISIONING_SUCCEEDED = "ProvisioningSucceeded"
EVENT_REASON_PROVISIONING_FAILED = "ProvisioningFailed"
