"""
Shipping price calculation.

Countries are grouped into zones (A near, B medium, C far). A route is
priced with the more expensive zone of its two ends, so prices are the same
in both directions. Per-kg rates drop as the weight grows.
"""
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings

ZONES = {
    'A': [
        'Iraq', 'Turkey', 'Iran', 'Jordan', 'United Arab Emirates', 'Qatar', 'Saudi Arabia', 'Kuwait',
    ],
    'B': [
        # Europe
        'United Kingdom', 'Germany', 'Italy', 'France', 'Spain', 'Netherlands', 'Belgium', 'Sweden',
        'Switzerland', 'Austria', 'Norway', 'Denmark', 'Finland', 'Ireland', 'Portugal', 'Greece',
        'Poland', 'Czech Republic', 'Hungary', 'Romania',
        # Asia
        'Malaysia', 'Thailand',
    ],
    'C': ['China', 'Japan', 'United States', 'Canada', 'Australia'],
}

# USD per kg, keyed by the upper weight bound of each tier (None = no bound)
PRICING_TIERS = {
    'A': [(Decimal('2'), Decimal('5.0')), (Decimal('5'), Decimal('4.5')), (Decimal('10'), Decimal('4.0')), (None, Decimal('3.5'))],
    'B': [(Decimal('2'), Decimal('5.5')), (Decimal('5'), Decimal('5.0')), (Decimal('10'), Decimal('4.5')), (None, Decimal('4.0'))],
    'C': [(Decimal('2'), Decimal('6.0')), (Decimal('5'), Decimal('5.5')), (Decimal('10'), Decimal('5.0')), (None, Decimal('4.5'))],
}

INSURANCE_MULTIPLIERS = {
    0: Decimal('1'),
    25: Decimal('1.5'),
    50: Decimal('2'),
    75: Decimal('2.5'),
    100: Decimal('3'),
}

ROUTE_NOT_SUPPORTED = 'Route not supported for calculation.'


def get_zone(country):
    for zone, countries in ZONES.items():
        if country in countries:
            return zone
    return None


def zoned_countries():
    """Sorted list of every country that has a pricing zone"""
    return sorted({country for countries in ZONES.values() for country in countries})


def get_price_per_kg(zone, weight):
    weight = Decimal(str(weight))
    if weight <= 0:
        return Decimal('0')
    for upper_bound, rate in PRICING_TIERS[zone]:
        if upper_bound is None or weight <= upper_bound:
            return rate
    return Decimal('0')


def usd_to_iqd(amount_usd):
    rate = Decimal(str(getattr(settings, 'USD_TO_IQD_RATE', 1500)))
    return int((Decimal(str(amount_usd)) * rate).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def get_insurance_multiplier(percentage):
    return INSURANCE_MULTIPLIERS.get(int(percentage or 0), Decimal('1'))


def calculate_shipping_cost(origin_country, destination_country, weight, insurance_percentage=0):
    """
    Price a shipment.

    Returns a dict with price_per_kg_usd, total_price_usd, total_price_iqd
    and error. error is set (and prices are zero) when either country has
    no zone; a weight of zero or less costs nothing.
    """
    zone_origin = get_zone(origin_country)
    zone_destination = get_zone(destination_country)
    result = {
        'zone': None,
        'price_per_kg_usd': Decimal('0'),
        'total_price_usd': Decimal('0'),
        'total_price_iqd': 0,
        'insurance_multiplier': get_insurance_multiplier(insurance_percentage),
        'error': None,
    }

    if not zone_origin or not zone_destination:
        result['error'] = ROUTE_NOT_SUPPORTED
        return result

    weight = Decimal(str(weight))
    final_zone = max(zone_origin, zone_destination)
    result['zone'] = final_zone
    if weight <= 0:
        return result

    price_per_kg = get_price_per_kg(final_zone, weight) * result['insurance_multiplier']
    total_usd = (weight * price_per_kg).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
    result['price_per_kg_usd'] = price_per_kg
    result['total_price_usd'] = total_usd
    result['total_price_iqd'] = usd_to_iqd(total_usd)
    return result


def default_charge_per_kg(origin_country, destination_country):
    """Lightest-tier rate for a route, or None when the route has no zone"""
    zone_origin = get_zone(origin_country)
    zone_destination = get_zone(destination_country)
    if not zone_origin or not zone_destination:
        return None
    return get_price_per_kg(max(zone_origin, zone_destination), 1)
