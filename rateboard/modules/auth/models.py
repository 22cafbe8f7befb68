# Supabase Auth
# This module uses Supabase's built-in authentication system
# Identities live in auth.users and are managed by Supabase Auth:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users
- auth.admin.create_user() - Provision users with the service role key
- auth.admin.update_user_by_id() - Change a user's password

Signup metadata (user_metadata) carries "name" and "address". The
on_auth_user_created trigger copies them into public.profiles and assigns
the default normal_user role; see rateboard.database.triggers for the
Python counterpart.
"""
