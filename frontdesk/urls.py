from django.urls import path
from . import views

app_name = "frontdesk"

urlpatterns = [

    # =========================================================================
    # SYSTEM / HEALTH
    # =========================================================================
    path("health/",                                 views.health,                  name="health"),
    path("mode/",                                   views.mode,                    name="mode"),

    # =========================================================================
    # AUTHENTICATION
    # =========================================================================
    path("auth/login/",                             views.login_view,              name="auth-login"),
    path("auth/logout/",                            views.logout_view,             name="auth-logout"),
    path("auth/profile/",                           views.profile_view,            name="auth-profile"),
    path("auth/change-password/",                   views.change_password_view,    name="auth-change-password"),

    # =========================================================================
    # ADMINS
    # =========================================================================
    path("admins/",                                 views.admin_list_create,       name="admin-list"),
    path("admins/users/",                           views.staff_user_create,       name="admin-users"),
    path("admins/roles/",                           views.role_list,               name="admin-roles"),
    path("admins/by-role/<str:role>/",              views.admins_by_role,          name="admin-by-role"),
    path("admins/stats/",                           views.admin_stats,             name="admin-stats"),
    path("admins/<uuid:admin_id>/",                 views.admin_update,            name="admin-update"),
    path("admins/<uuid:admin_id>/deactivate/",      views.admin_deactivate,        name="admin-deactivate"),

    # =========================================================================
    # VISITORS
    # =========================================================================
    path("visitors/",                               views.visitor_list,            name="visitor-list"),
    path("visitors/check-in/",                      views.visitor_check_in,        name="visitor-check-in"),
    path("visitors/find/",                          views.visitor_find,            name="visitor-find"),
    path("visitors/current/active/",                views.visitors_active,         name="visitor-active"),
    path("visitors/current/overdue/",               views.visitors_overdue,        name="visitor-overdue"),
    path("visitors/stats/summary/",                 views.visitor_stats_summary,   name="visitor-stats"),
    path("visitors/<uuid:visitor_id>/",             views.visitor_detail,          name="visitor-detail"),
    path("visitors/<uuid:visitor_id>/history/",     views.visitor_history,         name="visitor-history"),
    path("visitors/<uuid:visitor_id>/checkout/",    views.visitor_checkout,        name="visitor-checkout"),

    # =========================================================================
    # EMERGENCIES
    # =========================================================================
    path("emergencies/",                            views.emergency_list_create,   name="emergency-list"),
    path("emergencies/active-count/",               views.emergency_active_count,  name="emergency-active-count"),
    path("emergencies/<uuid:emergency_id>/resolve/", views.emergency_resolve,      name="emergency-resolve"),
    path("emergencies/<uuid:emergency_id>/cancel/",  views.emergency_cancel,       name="emergency-cancel"),
]
