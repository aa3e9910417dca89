from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from app.core.config import settings
from app.services.list_view import (
    Comparator,
    Stringifier,
    date_key,
    field_comparator,
    locale_date,
)


APPROVED = "APPROVED"
DECLINED = "DECLINED"


@dataclass(frozen=True)
class ApprovalFlow:
    """How one change-request list posts an approve or decline decision."""
    decision_endpoint: str
    id_key: str = "id"
    action_key: str = "action"
    reason_key: str = "note"
    approve_note: Optional[str] = None
    numeric_id: bool = False

    def body(self, record_id: str, action: str, reason: Optional[str] = None) -> Dict[str, Any]:
        identifier: Any = record_id
        if self.numeric_id and str(record_id).isdigit():
            identifier = int(record_id)

        body = {self.id_key: identifier, self.action_key: action}
        if reason:
            body[self.reason_key] = reason
        elif action == APPROVED and self.approve_note:
            body[self.reason_key] = self.approve_note
        return body


@dataclass(frozen=True)
class DomainConfig:
    name: str
    label: str
    list_endpoint: str
    id_field: str = "id"
    detail_endpoint: Optional[str] = None      # "{id}" is replaced with the record id
    delete_endpoint: Optional[str] = None
    search_fields: Tuple[str, ...] = ()
    sortable_fields: Mapping[str, Comparator] = field(default_factory=dict)
    stringifiers: Mapping[str, Stringifier] = field(default_factory=dict)
    filter_fields: Tuple[str, ...] = ()
    page_size: int = 10
    page_size_options: Tuple[int, ...] = ()
    envelope_keys: Tuple[str, ...] = ("data",)
    text_source: bool = False
    approval: Optional[ApprovalFlow] = None

    def detail_url(self, record_id: str) -> Optional[str]:
        if not self.detail_endpoint:
            return None
        return self.detail_endpoint.replace("{id}", str(record_id))

    def delete_url(self, record_id: str) -> Optional[str]:
        if not self.delete_endpoint:
            return None
        return self.delete_endpoint.replace("{id}", str(record_id))

    def normalize_page_size(self, requested: Optional[int]) -> int:
        if not requested:
            return self.page_size
        if self.page_size_options and requested not in self.page_size_options:
            return self.page_size
        return requested if requested > 0 else self.page_size


def _text(*names: str) -> Dict[str, Comparator]:
    return {name: field_comparator(name) for name in names}


def _dates(*names: str) -> Dict[str, Comparator]:
    return {name: field_comparator(name, key=date_key) for name in names}


def _locale_dates(*names: str) -> Dict[str, Stringifier]:
    return {name: locale_date for name in names}


def _merge(*parts: Mapping) -> Dict:
    merged: Dict = {}
    for part in parts:
        merged.update(part)
    return merged


# =====================================================
# DOMAINS
# =====================================================

MEMBERS = DomainConfig(
    name="members",
    label="Members",
    list_endpoint="/api/member/get_members",
    id_field="membershipId",
    detail_endpoint="/api/member/get_member/{id}",
    delete_endpoint="/api/member/{id}",
    search_fields=("applicantName", "firmName", "membershipId"),
    sortable_fields=_merge(
        _text("membershipId", "applicantName", "firmName", "status"),
        _dates("createdAt"),
    ),
    stringifiers=_locale_dates("createdAt"),
    filter_fields=("status",),
    page_size=10,
    page_size_options=(10, 20, 30, 40, 50),
)

VEHICLES = DomainConfig(
    name="vehicles",
    label="Vehicles",
    list_endpoint="/api/vehicle/get_vehicles",
    id_field="vehicleId",
    detail_endpoint="/api/vehicle/search_vehicle/{id}",
    delete_endpoint="/api/vehicle/delete_vehicle/{id}",
    search_fields=("vehicleNumber", "driverName", "vehicleId"),
    sortable_fields=_merge(
        _text("vehicleId", "vehicleNumber", "driverName", "status"),
        _dates("createdAt"),
    ),
    stringifiers=_locale_dates("createdAt"),
    filter_fields=("status",),
    page_size=15,
)

TRIPS = DomainConfig(
    name="trips",
    label="Trips",
    list_endpoint="/api/vehicle/get_trips",
    id_field="tripId",
    detail_endpoint="/api/vehicle/get_trip_id/{id}",
    delete_endpoint="/api/vehicle/delete_trip/{id}",
    search_fields=("tripId", "vehicle.vehicleNumber", "vehicle.driverName"),
    sortable_fields=_merge(
        _text(
            "tripId", "numberOfTrips", "amountPerTrip", "totalAmount",
            "amountPaid", "balanceAmount", "paymentStatus",
        ),
        _dates("tripDate", "createdAt"),
    ),
    stringifiers=_locale_dates("tripDate", "createdAt"),
    filter_fields=("paymentStatus", "vehicleId"),
    page_size=10,
)

LEASE_QUERIES = DomainConfig(
    name="lease-queries",
    label="Lease Queries",
    list_endpoint="/api/lease_query/get_lease_queries",
    id_field="leaseQueryId",
    detail_endpoint="/api/lease_query/get_lease_query/{id}",
    delete_endpoint="/api/lease_query/delete_lease_query/{id}",
    search_fields=("leaseQueryId", "membershipId", "presentLeaseHolder", "members.firmName"),
    sortable_fields=_merge(
        _text("leaseQueryId", "membershipId", "presentLeaseHolder", "status"),
        _dates("dateOfLease", "expiryOfLease", "createdAt"),
    ),
    stringifiers=_locale_dates("dateOfLease", "expiryOfLease"),
    filter_fields=("status", "membershipId"),
    page_size=5,
)

GST_FILINGS = DomainConfig(
    name="gst-filings",
    label="GST Filings",
    list_endpoint="/api/gst_filing/get_gst_filings",
    detail_endpoint="/api/gst_filing/get_gst_filing/{id}",
    delete_endpoint="/api/gst_filing/delete_gst_filing/{id}",
    search_fields=("id", "filingPeriod", "members.firmName"),
    sortable_fields=_merge(
        _text("id", "membershipId", "filingPeriod", "totalAmount", "totalTaxableAmount", "status"),
        # unfiled rows have no filing date and sort last
        _dates("filingDate", "dueDate", "createdAt"),
    ),
    stringifiers=_locale_dates("filingDate", "dueDate"),
    filter_fields=("membershipId", "status"),
    page_size=20,
    page_size_options=(20, 50, 100, 200),
)

INVOICES = DomainConfig(
    name="invoices",
    label="Tax Invoices",
    list_endpoint="/api/tax_invoice/get_tax_invoice",
    id_field="invoiceId",
    detail_endpoint="/api/tax_invoice/get_tax_invoice_id/{id}",
    delete_endpoint="/api/tax_invoice/delete_tax_invoice/{id}",
    search_fields=("invoiceId", "membershipId", "members.firmName"),
    sortable_fields=_merge(
        _text("invoiceId", "membershipId", "totalAmount", "status"),
        _dates("invoiceDate", "createdAt"),
    ),
    stringifiers=_locale_dates("invoiceDate"),
    filter_fields=("membershipId", "status"),
    page_size=10,
    page_size_options=(10, 20, 50, 100),
    envelope_keys=("taxInvoices", "data"),
)

MEETINGS = DomainConfig(
    name="meetings",
    label="Meetings",
    list_endpoint="/api/meeting/get_meetings",
    detail_endpoint="/api/meeting/get_meeting/{id}",
    delete_endpoint="/api/meeting/delete_meeting/{id}",
    search_fields=("title", "agenda", "id"),
    sortable_fields=_merge(
        _text("id", "title", "status", "expectedAttendees"),
        _dates("date", "createdAt"),
    ),
    stringifiers=_locale_dates("date"),
    filter_fields=("status",),
    page_size=5,
)

USERS = DomainConfig(
    name="users",
    label="Users",
    list_endpoint="/api/user/get_all_user",
    detail_endpoint="/api/user/get_user/{id}",
    delete_endpoint="/api/user/delete_user/{id}",
    search_fields=("fullName", "email", "phone"),
    sortable_fields=_merge(
        _text("fullName", "email", "role", "status"),
        _dates("createdAt"),
    ),
    filter_fields=("role", "status"),
    page_size=10,
)

LABOUR = DomainConfig(
    name="labour",
    label="Labour",
    list_endpoint="/api/labour/get_labour",
    id_field="labourId",
    detail_endpoint="/api/labour/get_labour_id/{id}",
    delete_endpoint="/api/labour/delete_labour/{id}",
    search_fields=("fullName", "phoneNumber", "aadharNumber", "labourId"),
    sortable_fields=_merge(
        _text("labourId", "fullName", "labourStatus", "assignedToMemberId"),
        _dates("createdAt"),
    ),
    filter_fields=("labourStatus", "assignedToMemberId"),
    page_size=10,
)

MEMBERSHIP_FEES = DomainConfig(
    name="membership-fees",
    label="Membership Fees",
    list_endpoint="/api/bill/filterBills",
    id_field="billingId",
    detail_endpoint="/api/bill/getBillById/{id}",
    delete_endpoint="/api/bill/delete_bill/{id}",
    search_fields=("billingId", "membershipId", "receiptNumber"),
    sortable_fields=_merge(
        _text("billingId", "membershipId", "totalAmount", "paidAmount", "paymentStatus"),
        _dates("fromDate", "toDate", "createdAt"),
    ),
    stringifiers=_locale_dates("fromDate", "toDate"),
    filter_fields=("paymentStatus", "membershipId"),
    page_size=10,
)

LOGS = DomainConfig(
    name="logs",
    label="Backend Logs",
    list_endpoint="/api/logs/get_logs?type=combined",
    search_fields=("message",),
    sortable_fields=_text("timestamp", "level"),
    filter_fields=("level",),
    page_size=50,
    text_source=True,
)

NOTIFY_LOGS = DomainConfig(
    name="notify-logs",
    label="Notify Logs",
    list_endpoint=f"{settings.NOTIFY_API_URL.rstrip('/')}/api/logs?type=combined",
    search_fields=("message",),
    sortable_fields=_text("timestamp", "level"),
    filter_fields=("level",),
    page_size=50,
    text_source=True,
)

# =====================================================
# CHANGE REQUESTS (editor edits waiting for approval)
# =====================================================

MEMBER_CHANGES = DomainConfig(
    name="member-changes",
    label="Membership Changes",
    list_endpoint="/api/member/get_member_changes/ALL",
    search_fields=("membershipId", "modifiedByEditor.fullName"),
    sortable_fields=_merge(
        _text("membershipId", "approvalStatus"),
        _dates("modifiedAt"),
    ),
    stringifiers=_locale_dates("modifiedAt"),
    filter_fields=("approvalStatus",),
    page_size=10,
    approval=ApprovalFlow(
        decision_endpoint="/api/member/approve_decline_member_changes",
        id_key="pendingChangeId",
        reason_key="declineReason",
    ),
)

MEMBERSHIP_FEE_CHANGES = DomainConfig(
    name="membership-fee-changes",
    label="Membership Fee Changes",
    list_endpoint="/api/bill/get_bill_update_request",
    id_field="billingId",
    search_fields=("billingId", "note"),
    sortable_fields=_merge(
        _text("billingId", "approvalStatus"),
        _dates("modifiedAt"),
    ),
    stringifiers=_locale_dates("modifiedAt"),
    filter_fields=("approvalStatus",),
    page_size=10,
    envelope_keys=("pendingRequest", "data"),
    approval=ApprovalFlow(
        decision_endpoint="/api/bill/approve_decline_bill_changes",
        id_key="billingId",
        action_key="approvalStatus",
    ),
)

INVOICE_CHANGES = DomainConfig(
    name="invoice-changes",
    label="Invoice Changes",
    list_endpoint="/api/tax_invoice/get_update_request/ALL",
    search_fields=("invoiceId", "updatedData.customerName", "updatedData.membershipId"),
    sortable_fields=_merge(
        _text("invoiceId", "approvalStatus"),
        _dates("modifiedAt"),
    ),
    stringifiers=_locale_dates("modifiedAt"),
    filter_fields=("approvalStatus",),
    page_size=10,
    envelope_keys=("invoiceChangeRequests", "data"),
    approval=ApprovalFlow(
        decision_endpoint="/api/tax_invoice/approve_decline_request",
        approve_note="Approved by admin",
        numeric_id=True,
    ),
)

LABOUR_CHANGES = DomainConfig(
    name="labour-changes",
    label="Labour Changes",
    list_endpoint="/api/labour/get_labour_change",
    search_fields=("labourId", "note"),
    sortable_fields=_merge(
        _text("labourId", "approvalStatus"),
        _dates("modifiedAt"),
    ),
    stringifiers=_locale_dates("modifiedAt"),
    filter_fields=("approvalStatus",),
    page_size=10,
    envelope_keys=("LabourChanges", "data"),
    approval=ApprovalFlow(
        decision_endpoint="/api/labour/approved_labour_change",
        approve_note="Approved by admin",
    ),
)

DOMAINS: Dict[str, DomainConfig] = {
    domain.name: domain
    for domain in (
        MEMBERS,
        VEHICLES,
        TRIPS,
        LEASE_QUERIES,
        GST_FILINGS,
        INVOICES,
        MEETINGS,
        USERS,
        LABOUR,
        MEMBERSHIP_FEES,
        LOGS,
        NOTIFY_LOGS,
        MEMBER_CHANGES,
        MEMBERSHIP_FEE_CHANGES,
        INVOICE_CHANGES,
        LABOUR_CHANGES,
    )
}


def get_domain(name: str) -> Optional[DomainConfig]:
    return DOMAINS.get(name)


def domain_names() -> Sequence[str]:
    return tuple(DOMAINS)
