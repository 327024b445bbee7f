# Services package init
"""
Stargazer Backend — Services Layer
===================================

Service Inventory:
    - StarService: list / get / create / update / delete stars, with
      not-found and duplicate-name signalling

Services take the request's AsyncSession as an argument and know nothing
about HTTP, so they are unit-tested with a mocked session.
"""
