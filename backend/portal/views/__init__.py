from portal.views.auth_handlers import (
    admin_login as admin_login,
)
from portal.views.auth_handlers import (
    login as login,
)
from portal.views.auth_handlers import (
    login_page as login_page,
)
from portal.views.auth_handlers import (
    logout as logout,
)
from portal.views.auth_handlers import (
    signup as signup,
)
from portal.views.auth_handlers import (
    signup_page as signup_page,
)
from portal.views.handlers import (
    admin_page as admin_page,
)
from portal.views.handlers import (
    create_templates as create_templates,
)
from portal.views.handlers import (
    demote_user as demote_user,
)
from portal.views.handlers import (
    home_page as home_page,
)
from portal.views.handlers import (
    members_page as members_page,
)
from portal.views.handlers import (
    promote_user as promote_user,
)
