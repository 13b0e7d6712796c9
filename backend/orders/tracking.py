"""Delivery tracking stages of an accepted request, in order"""

TRACKING_STAGES = [
    {'key': 'waiting_approval', 't_key': 'trackingWaitingApproval', 'icon': 'Clock', 'order': 1},
    {'key': 'item_accepted', 't_key': 'trackingItemAccepted', 'icon': 'CheckCircle', 'order': 2},
    {'key': 'payment_done', 't_key': 'trackingPaymentDone', 'icon': 'Wallet', 'order': 3},
    {'key': 'sender_photos_uploaded', 't_key': 'trackingSenderPhotosUploaded', 'icon': 'Camera', 'order': 4},
    {'key': 'traveler_inspection_complete', 't_key': 'trackingTravelerInspectionComplete', 'icon': 'ShieldCheck', 'order': 5},
    {'key': 'traveler_on_the_way', 't_key': 'trackingTravelerOnTheWay', 'icon': 'Plane', 'order': 6},
    {'key': 'delivered', 't_key': 'trackingDelivered', 'icon': 'MapPin', 'order': 7},
    {'key': 'completed', 't_key': 'trackingCompleted', 'icon': 'PackageCheck', 'order': 8},
]

TRACKING_CHOICES = [(stage['key'], stage['key'].replace('_', ' ').title()) for stage in TRACKING_STAGES]

_STAGES_BY_KEY = {stage['key']: stage for stage in TRACKING_STAGES}


def get_tracking_stage(key):
    return _STAGES_BY_KEY.get(key)


def get_next_stage(current):
    """Key of the stage following current, or None at the end / for unknown keys"""
    stage = get_tracking_stage(current)
    if not stage:
        return None
    for candidate in TRACKING_STAGES:
        if candidate['order'] == stage['order'] + 1:
            return candidate['key']
    return None
