"""Initial body sets.

Barycentric ecliptic J2000 positions (km) and velocities (km/s) at
2000-01-01T00:00:00 TT, taken from JPL Horizons.
"""
from .physics import Body

SOLAR_SYSTEM = [
    {
        "name": "Sun",
        "gm": 132712440041.93938,
        "pos": [-1.068108951496322e06, -4.177210908491462e05, 3.086887010002915e04],
        "vel": [9.305302656256911e-03, -1.283177282717393e-02, -1.631700118015769e-04],
        "radius": 696000.0,
    },
    {
        "name": "Mercury",
        "gm": 22031.86855,
        "pos": [-2.212073002393702e07, -6.682435921338345e07, -3.461577076477692e06],
        "vel": [3.666229234452722e01, -1.230266984222893e01, -4.368336206255391e00],
        "radius": 2440.0,
    },
    {
        "name": "Venus",
        "gm": 324858.592,
        "pos": [-1.085736592234813e08, -3.784241757371509e06, 6.190088659339075e06],
        "vel": [8.984650886248794e-01, -3.517203951420625e01, -5.320225928762774e-01],
        "radius": 6052.0,
    },
    {
        "name": "Earth",
        "gm": 398600.435436,
        "pos": [-2.627903751048988e07, 1.445101984929515e08, 3.025245352813601e04],
        "vel": [-2.983052803412253e01, -5.220465675237847e00, -1.014855999592612e-04],
        "radius": 6371.0,
    },
    {
        "name": "Moon",
        "gm": 4902.800066,
        "pos": [-2.659668775178492e07, 1.442683153167126e08, 6.680827660505474e04],
        "vel": [-2.926974096801152e01, -6.020397935372383e00, -1.740818643718001e-03],
        "radius": 1737.0,
    },
    {
        "name": "Mars",
        "gm": 42828.375214,
        "pos": [2.069270543147017e08, -3.560689745239088e06, -5.147936537447235e06],
        "vel": [1.304308833322233e00, 2.628158890420931e01, 5.188465740839767e-01],
        "radius": 3390.0,
    },
    {
        "name": "Jupiter",
        "gm": 126686531.900,
        "pos": [5.978410555886381e08, 4.387048655696349e08, -1.520164176015472e07],
        "vel": [-7.892632213479861e00, 1.115034525890079e01, 1.305100448596264e-01],
        "radius": 69911.0,
    },
    {
        "name": "Saturn",
        "gm": 37931206.159,
        "pos": [9.576383364792708e08, 9.821475307689621e08, -5.518981181311160e07],
        "vel": [-7.419580382572883e00, 6.725982471305630e00, 1.775012039800541e-01],
        "radius": 58232.0,
    },
    {
        "name": "Uranus",
        "gm": 5793951.322,
        "pos": [2.157706590772995e09, -2.055242872276605e09, -3.559274281048691e07],
        "vel": [4.646953838324629e00, 4.614361336011624e00, -4.301369677250144e-02],
        "radius": 25362.0,
    },
    {
        "name": "Neptune",
        "gm": 6835099.97,
        "pos": [2.513785451779509e09, -3.739265135509532e09, 1.907027540535474e07],
        "vel": [4.475107938022004e00, 3.062850546988970e00, -1.667293921151841e-01],
        "radius": 24624.0,
    },
]

PRESETS = {
    "Solar System": SOLAR_SYSTEM,
    "Sun, Earth & Moon": [
        cfg for cfg in SOLAR_SYSTEM if cfg["name"] in ("Sun", "Earth", "Moon")
    ],
}


def create_bodies(preset_name: str = "Solar System") -> list[Body]:
    """Return fresh :class:`Body` objects for a named preset."""
    if preset_name not in PRESETS:
        raise KeyError(f"Preset '{preset_name}' not found")
    return [
        Body(cfg["name"], cfg["gm"], cfg["pos"], cfg["vel"], cfg["radius"])
        for cfg in PRESETS[preset_name]
    ]
