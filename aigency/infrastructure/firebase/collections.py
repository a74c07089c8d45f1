"""Firestore collection and field names (schema-in-code).

The collections predate this service and are shared with the web client
and the automated-task executor, so names and camelCase field keys are
kept as those clients write them.
"""

COLLECTION_COMPANY_TASKS = "companyTasks"
COLLECTION_TASK_TEMPLATES = "tasks"

# Task document fields
FIELD_COMPANY_ID = "companyId"
FIELD_RENEWAL_TYPE = "renewalType"
FIELD_POLICY_TYPE = "policyType"
FIELD_TEMPLATE_ID = "templateId"
FIELD_TASK_NAME = "taskName"
FIELD_DESCRIPTION = "description"
FIELD_STATUS = "status"
FIELD_TAG = "tag"
FIELD_PHASE = "phase"
FIELD_DEPENDENCIES = "dependencies"
FIELD_SORT_ORDER = "sortOrder"
FIELD_CREATED_AT = "createdAt"
FIELD_UPDATED_AT = "updatedAt"
FIELD_COMPLETED_AT = "completedAt"
