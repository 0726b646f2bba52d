from ..core.config import settings

# Collection Names (child nodes of settings.DATABASE_ROOT)
COLLECTIONS = {
    'reports': 'reports',
    'users': 'users',
    'commodities': 'commodityList',
    'counters': 'counters',
}

# Collection Structure Documentation
COLLECTION_SCHEMAS = {
    'reports': {
        'fields': ['id', 'userId', 'reportType', 'status', 'photos', 'createdAt', 'updatedAt'],
        'required': ['id', 'createdAt', 'updatedAt'],
        'indexes': ['userId']
    },
    'users': {
        'fields': ['id', 'email', 'name', 'role', 'permissions', 'assignedOperators', 'lastLogin', 'createdAt', 'updatedAt'],
        'required': ['id', 'email', 'role', 'createdAt', 'updatedAt'],
        'indexes': ['role']
    },
    'commodityList': {
        'fields': ['id', 'createdAt', 'updatedAt'],
        'required': ['id', 'createdAt', 'updatedAt'],
        'indexes': []
    },
    'counters': {
        'fields': [],
        'required': [],
        'indexes': []
    },
}


def collection_path(collection: str, document_id: str = None) -> str:
    """Absolute database path for a collection node or one of its children."""
    path = f"{settings.DATABASE_ROOT}/{collection}"
    if document_id:
        path = f"{path}/{document_id}"
    return path
