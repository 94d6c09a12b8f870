import enum


class VariantStatus(str, enum.Enum):
    not_started = "NOT_STARTED"
    receiving = "RECEIVING"
    fully_received = "FULLY_RECEIVED"
    over_received = "OVER_RECEIVED"
    locked = "LOCKED"
    canceled = "CANCELED"


class RejectionReason(str, enum.Enum):
    canceled = "CANCELED"
    locked = "LOCKED"
    nothing_to_remove = "NOTHING_TO_REMOVE"
    nothing_received = "NOTHING_RECEIVED"
    out_of_range = "OUT_OF_RANGE"
    nothing_to_submit = "NOTHING_TO_SUBMIT"
