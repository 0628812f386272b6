"""Application services: project scopes and workload lifecycles."""
