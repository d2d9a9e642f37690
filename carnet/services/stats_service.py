from flask import current_app

from carnet.repositories.loan_repo import LoanRepo
from carnet.repositories.staff_repo import StaffRepo
from carnet.repositories.student_repo import StudentRepo
from carnet.models.loan import LOAN_ACTIVE
from carnet.services.card_status import CardStatus, count_by_status
from carnet.services.loan_service import LoanService
from carnet.utils.dates import utcnow

RECENT_LIMIT = 5


class StatsService:
    @staticmethod
    def dashboard(now=None) -> dict:
        # un solo "now" para conteos y badges
        now = now or utcnow()
        window = current_app.config.get("EXPIRING_SOON_DAYS", 30)

        students = StudentRepo.list_all()
        by_status = count_by_status(students, now, window)

        recent_loans = LoanRepo.find(status=LOAN_ACTIVE, limit=RECENT_LIMIT)

        return {
            "total_students": len(students),
            # activo y no vencido (incluye los que están por vencer)
            "active_cards": by_status[CardStatus.ACTIVE.value] + by_status[CardStatus.EXPIRING_SOON.value],
            "expiring": by_status[CardStatus.EXPIRING_SOON.value],
            "by_status": by_status,
            "staff": StaffRepo.count(),
            "active_loans": LoanRepo.count_active(),
            "recent_loans": [
                {**l.to_dict(), "days_borrowed": LoanService.days_borrowed(l, now)} for l in recent_loans
            ],
            "recent_students": [s.to_dict(include_photo=False) for s in StudentRepo.list_recent(RECENT_LIMIT)],
        }
