# Accounts live in Supabase Auth (auth.users); this backend never stores passwords or issues tokens.
#
# Sign-up metadata (first_name, last_name) is copied into public.profiles by the
# handle_new_user trigger, which also defaults the role to 'employee' and leaves
# workspace_id empty until an admin assigns one.
#
# Calls used by this service:
#   auth.sign_up / auth.sign_in_with_password / auth.sign_out
#   auth.get_user(jwt)          bearer token validation (cached, see TokenCache)
#   auth.admin.delete_user(id)  profile deletion, service_role client only
