"""AWS provider: EC2 networking, Route 53 and ECS workloads."""
