# Services package init
"""
PAWhere Backend — Services Layer
==================================

Service Inventory:
    - validation: body decoding and the registration schema check
    - RegistrationStorage (abstract): storage contract
    - RegistrationStore: SQLAlchemy implementation, including ensure_schema()
    - RegistrationService: intake flow (schema → validate → dedup → insert)
"""
