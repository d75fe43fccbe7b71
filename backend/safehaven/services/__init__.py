# Services package init
"""
Safe Haven Backend: Services Layer
====================================

Business rules between the routes (HTTP) and the repositories (persistence).

Service Inventory:
    - SchedulingValidator:         candidate booking → normalized AppointmentDraft
    - StatusStateMachine:          legal, role-permitted status transitions
    - CounselorAssignmentStrategy: picks a counselor for a new booking
    - AppointmentService:          booking, listing, status and notes use cases
    - UserService:                 registration, sign-in, profiles, activation
    - ContactService:              contact form emails
    - MailService / SMTPMailService: outbound email with retries
    - UserRepository / AppointmentRepository: persistence contracts (+ SQL versions)
"""
