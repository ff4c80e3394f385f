"""
Permissions and Roles Configuration
This config defines the permission matrix for every resource and the profile
roles (root, admin, manager, employee) that hold them.
Roles live on the profile row; the matrix is resolved in-process on each request.
"""

ROLES = ["root", "admin", "manager", "employee"]

# Roles allowed to author workflows (create/edit/delete)
WORKFLOW_AUTHOR_ROLES = ["admin", "manager", "root"]

# Roles allowed to administer users
USER_ADMIN_ROLES = ["admin", "root"]

# Define resources and their actions
RESOURCES = {
    "workflows": {
        "actions": ["create", "read", "update", "delete"],
        "description": "Workflow templates and their ordered steps"
    },
    "workflow_definitions": {
        "actions": ["create", "read", "update", "delete", "publish"],
        "description": "Visual builder graphs"
    },
    "instances": {
        "actions": ["start", "read", "advance", "cancel", "manage"],
        "description": "Running workflow instances"
    },
    "assignments": {
        "actions": ["read", "update", "create"],
        "description": "Workflow step assignments"
    },
    "profiles": {
        "actions": ["read", "update", "delete", "change_role"],
        "description": "User profile management"
    },
    "workspaces": {
        "actions": ["create", "read", "update", "delete", "assign"],
        "description": "Workspace (tenant) management"
    },
    "modules": {
        "actions": ["read", "manage"],
        "description": "Feature module activation per workspace"
    },
    "presence": {
        "actions": ["read"],
        "description": "User presence dashboard"
    },
    "ai": {
        "actions": ["use"],
        "description": "AI workflow generation and review"
    },
    "admin": {
        "actions": ["cleanup"],
        "description": "Destructive data maintenance"
    },
}

# Additional descriptions for specific permissions
PERMISSION_DESCRIPTIONS = {
    "workflow_definitions:publish": "Publish a builder graph as a runnable workflow",
    "instances:manage": "See and cancel every instance, not only your own",
    "assignments:create": "Create assignments for assigned workflow steps",
    "profiles:change_role": "Change the role of a user",
    "workspaces:assign": "Assign users to workspaces",
    "modules:manage": "Activate and deactivate modules",
    "admin:cleanup": "Delete all workflow data",
}

# Grants per role; "*" means every action of the resource
ROLE_GRANTS = {
    "admin": {
        "workflows": "*",
        "workflow_definitions": "*",
        "instances": "*",
        "assignments": "*",
        "profiles": "*",
        "workspaces": ["read", "update", "assign"],
        "modules": ["read"],
        "ai": "*",
    },
    "manager": {
        "workflows": "*",
        "workflow_definitions": "*",
        "instances": "*",
        "assignments": "*",
        "profiles": ["read"],
        "workspaces": ["read"],
        "modules": ["read"],
        "ai": "*",
    },
    "employee": {
        "workflows": ["read"],
        "workflow_definitions": ["read"],
        "instances": ["start", "read", "advance"],
        "assignments": ["read", "update"],
        "profiles": ["read"],
        "workspaces": ["read"],
        "modules": ["read"],
        "ai": "*",
    },
}


def get_permission_matrix():
    """
    Returns a dictionary with all permissions and the permissions of each role
    Format: {
        "permissions": [
            {"name": "workflows:create", "resource": "workflows", "action": "create", "description": "..."},
            ...
        ],
        "roles": {
            "manager": ["ai:use", "assignments:create", ...],
            ...
        }
    }
    """
    permissions = []
    for resource, resource_config in RESOURCES.items():
        for action in resource_config["actions"]:
            permission_name = f"{resource}:{action}"
            description = PERMISSION_DESCRIPTIONS.get(
                permission_name, f"{action.capitalize()} {resource.replace('_', ' ')}"
            )
            permissions.append({
                "name": permission_name,
                "resource": resource,
                "action": action,
                "description": description
            })

    roles = {"root": sorted(p["name"] for p in permissions)}
    for role, grants in ROLE_GRANTS.items():
        role_permissions = []
        for resource, actions in grants.items():
            if actions == "*":
                actions = RESOURCES[resource]["actions"]
            for action in actions:
                if action in RESOURCES[resource]["actions"]:
                    role_permissions.append(f"{resource}:{action}")
        roles[role] = sorted(role_permissions)

    return {
        "permissions": permissions,
        "roles": roles
    }


def get_role_permissions(role: str):
    """Permission names held by a role; unknown roles hold none."""
    return PERMISSION_MATRIX["roles"].get(role, [])


PERMISSION_MATRIX = get_permission_matrix()
