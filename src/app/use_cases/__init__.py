"""
Use Cases

Organized by area:
- auth/: Login, logout and session checks
- registration/: Invite-gated registration and provisioning retries
- invite_codes/: Invite code generation, listing and revocation
- users/: Account administration and the bootstrap admin

Import from the subpackages.
"""
