"""비즈니스 로직 서비스 패키지.

Business logic services: the attendance validator and reducer, the access
policy, collaborator clients and one service per API resource.
"""
