"""Domain packages - one per feature area (schemas, repository, service, router)"""
