# constants/roster.py
# Built-in demo roster; point `roster.path` in config.yaml at a YAML file to replace it.

DEFAULT_ROSTER = [
    {
        "id": "w1",
        "name": "Marcus Thompson",
        "trade": "Electrician",
        "specialties": ["Residential Wiring", "Panel Upgrades", "Lighting Installation"],
        "rating": 4.8,
        "reviewCount": 167,
        "distance": 1.2,
        "hourlyRate": 85,
        "availability": ["tomorrow", "next-week"],
        "certifications": ["Master Electrician License", "OSHA Certified"],
        "experience": 12,
        "completedJobs": 340,
    },
    {
        "id": "w2",
        "name": "Rick Williams",
        "trade": "Plumber",
        "specialties": ["Pipe Repair", "Water Heater Installation", "Drain Cleaning"],
        "rating": 4.7,
        "reviewCount": 203,
        "distance": 2.8,
        "hourlyRate": 75,
        "availability": ["today", "tomorrow"],
        "certifications": ["Licensed Plumber", "Backflow Prevention"],
        "experience": 8,
        "completedJobs": 285,
    },
    {
        "id": "w3",
        "name": "Jake Roberts",
        "trade": "Auto Mechanic",
        "specialties": ["Engine Repair", "Brake Service", "Diagnostics"],
        "rating": 4.8,
        "reviewCount": 157,
        "distance": 3.2,
        "hourlyRate": 95,
        "availability": ["tomorrow"],
        "certifications": ["ASE Certified", "Hybrid Vehicle Specialist"],
        "experience": 15,
        "completedJobs": 420,
    },
    {
        "id": "w4",
        "name": "Alex Turner",
        "trade": "Auto Mechanic",
        "specialties": ["Oil Changes", "Tire Service", "Basic Maintenance"],
        "rating": 4.6,
        "reviewCount": 89,
        "distance": 4.1,
        "hourlyRate": 65,
        "availability": ["tomorrow", "next-week"],
        "certifications": ["Basic Auto Repair"],
        "experience": 5,
        "completedJobs": 150,
    },
    {
        "id": "w5",
        "name": "Danny Fix",
        "trade": "Mobile Mechanic",
        "specialties": ["On-site Repair", "Emergency Service", "Diagnostics"],
        "rating": 4.7,
        "reviewCount": 134,
        "distance": 2.5,
        "hourlyRate": 90,
        "availability": ["today", "tomorrow"],
        "certifications": ["Mobile Service Certified", "Emergency Response"],
        "experience": 10,
        "completedJobs": 275,
    },
]
