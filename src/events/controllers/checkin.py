from ninja_extra import api_controller, route
from ninja_extra.permissions import IsAdminUser
from ninja_jwt.authentication import JWTAuth

from common.controllers import UserAwareController
from events.schema import CheckInPayload, CheckInResultSchema
from events.service import checkin_service


@api_controller("/check-in", tags=["Check-in"], auth=JWTAuth(), permissions=[IsAdminUser])
class CheckInController(UserAwareController):
    @route.post("/", url_name="ticket_check_in", response=CheckInResultSchema)
    def check_in(self, payload: CheckInPayload) -> checkin_service.CheckInResult:
        """Check in the ticket behind a scanned code. Staff only."""
        return checkin_service.check_in_by_scan_code(payload.scan_code, self.user())
