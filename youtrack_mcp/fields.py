"""
YouTrack REST API field projections for reference data.

YouTrack returns only id and $type by default; every other field must be
requested explicitly through the ``fields`` query parameter.
"""

# User
USER = "id,login,fullName,email,ringId,guest,online,banned,avatarUrl"

# Project: minimal list projection and a detail projection with the leader
PROJECT_LIST = "id,name,shortName,archived,template"

PROJECT_DETAIL = (
    "id,name,shortName,description,archived,template,"
    "leader(id,login,fullName)"
)

# Tag
TAG = "id,name,color(id,background,foreground),owner(id,login,fullName)"

# Issue link type
LINK_TYPE = "id,name,localizedName,sourceToTarget,targetToSource,directed,aggregation"

# Global custom fields (/api/admin/customFieldSettings/customFields)
GLOBAL_CUSTOM_FIELD = (
    "id,name,localizedName,aliases,$type,"
    "fieldType(id,presentation),"
    "isDisplayedInIssueList,isAutoAttached,isPublic"
)
