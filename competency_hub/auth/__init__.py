"""Auth module — registration, password login, JWT sessions, RBAC."""
