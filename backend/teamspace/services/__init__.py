# Services package init
"""
Teamspace Backend — Services Layer
====================================

What:  Business logic layer sitting between routes (HTTP) and the stores.
Why:   Routes handle HTTP; services own the rules (validation, ownership,
       bootstrap, summary computation).
How:   Services are stateless singletons. Every call receives the request's
       AsyncSession, so one transaction covers everything a request does.

Service Inventory:
    - UserService:      register, login, profile, password, account deletion
    - NoteService:      note CRUD, pagination, search, soft delete
    - TeamService:      default team and sample teammates, roster listing
    - EventService:     team calendar and sample events
    - MessagingService: conversation summaries, messages, read state
    - ChatService:      document-store chats (Motor), constructed per database
    - mock_data:        offline fixtures served when DATABASE_DISABLED=true
"""
