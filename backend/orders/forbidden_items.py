"""Items travelers may not carry; keys are client translation keys"""

FORBIDDEN_ITEMS = [
    {'key': 'explosives', 'icon': 'Bomb'},
    {'key': 'flammableLiquids', 'icon': 'Flame'},
    {'key': 'compressedGases', 'icon': 'Container'},
    {'key': 'poisons', 'icon': 'Skull'},
    {'key': 'corrosives', 'icon': 'Biohazard'},
    {'key': 'radioactiveMaterials', 'icon': 'Radiation'},
    {'key': 'powerBanks', 'icon': 'BatteryCharging'},
    {'key': 'eCigarettes', 'icon': 'CigaretteOff'},  # vapes included
    {'key': 'spareLithiumBatteries', 'icon': 'Battery'},
    {'key': 'drones', 'icon': 'CameraOff'},
    {'key': 'certainElectronics', 'icon': 'CircuitBoard'},
    {'key': 'politicallySensitive', 'icon': 'FileLock'},
]
