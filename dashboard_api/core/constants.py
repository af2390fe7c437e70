# n8n REST paths, relative to {base_url}/api/v1
WORKFLOWS_PATH = "/workflows"
WORKFLOW_LIST_PATH = "/workflows?limit=100"
HEALTH_PROBE_PATH = "/workflows?limit=10"

DEFAULT_N8N_BASE_URL = "https://n8n.srv860213.hstgr.cloud"
