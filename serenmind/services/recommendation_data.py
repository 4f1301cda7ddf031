FALLBACK_MOOD = "Neutral"

ACTIVITIES = {
    "Happy": [
        {
            "id": "activity-1",
            "title": "Gratitude Journaling",
            "description": "Enhance your positive mood by reflecting on things you're grateful for.",
            "duration": "10 min",
            "category": "Mindfulness",
            "benefits": ["Reinforces positive emotions", "Creates lasting happiness", "Improves self-awareness"],
            "steps": [
                "Find a quiet space where you won't be disturbed",
                "Write down 3-5 things you're grateful for today",
                "For each item, explain why it brings you joy",
                "Reflect on how these positive elements affect your life",
            ],
            "icon": "journaling",
        },
        {
            "id": "activity-2",
            "title": "Joy Sharing",
            "description": "Share your positive energy with someone else to multiply your happiness.",
            "duration": "15 min",
            "category": "Social",
            "benefits": ["Strengthens relationships", "Extends positive feelings", "Creates meaningful connections"],
            "steps": [
                "Think of someone who might need a mood boost",
                "Reach out via call, text, or in person",
                "Share something positive or offer a compliment",
                "Listen and engage genuinely",
            ],
            "icon": "nature",
        },
    ],
    "Calm": [
        {
            "id": "activity-3",
            "title": "Progressive Muscle Relaxation",
            "description": "Maintain your calm state by releasing any remaining tension in your body.",
            "duration": "15 min",
            "category": "Relaxation",
            "benefits": ["Deepens physical relaxation", "Increases body awareness", "Enhances calm state"],
            "steps": [
                "Find a comfortable position lying down",
                "Tense each muscle group for 5 seconds, then release",
                "Work from toes to head, noticing the difference between tension and relaxation",
                "End with deep breathing",
            ],
            "icon": "meditation",
        },
        {
            "id": "activity-4",
            "title": "Mindful Tea Ritual",
            "description": "Use all your senses to enjoy a calming cup of herbal tea.",
            "duration": "10 min",
            "category": "Mindfulness",
            "benefits": ["Encourages present-moment awareness", "Extends relaxation", "Creates a calming ritual"],
            "steps": [
                "Prepare your favorite herbal tea (chamomile, lavender, or mint work well)",
                "Notice the colors, smells, and sounds as you prepare it",
                "Feel the warmth of the cup in your hands",
                "Sip slowly, focusing entirely on the experience",
            ],
            "icon": "nature",
        },
    ],
    "Anxious": [
        {
            "id": "activity-5",
            "title": "4-7-8 Breathing Exercise",
            "description": "A powerful breathing technique to quickly calm your nervous system.",
            "duration": "5 min",
            "category": "Breathing",
            "benefits": ["Reduces anxiety quickly", "Activates parasympathetic nervous system", "Can be done anywhere"],
            "steps": [
                "Sit comfortably with your back straight",
                "Inhale quietly through your nose for 4 seconds",
                "Hold your breath for 7 seconds",
                "Exhale completely through your mouth for 8 seconds",
                "Repeat 4-6 times",
            ],
            "icon": "breathing",
        },
        {
            "id": "activity-6",
            "title": "Grounding Exercise",
            "description": "Use your five senses to anchor yourself in the present moment.",
            "duration": "5 min",
            "category": "Mindfulness",
            "benefits": ["Interrupts anxiety cycle", "Brings awareness to the present", "Calms racing thoughts"],
            "steps": [
                "Name 5 things you can see",
                "Name 4 things you can touch or feel",
                "Name 3 things you can hear",
                "Name 2 things you can smell",
                "Name 1 thing you can taste",
            ],
            "icon": "meditation",
        },
    ],
    "Sad": [
        {
            "id": "activity-7",
            "title": "Gentle Movement",
            "description": "Light physical activity to release endorphins and improve your mood.",
            "duration": "15 min",
            "category": "Exercise",
            "benefits": [
                "Releases mood-boosting endorphins",
                "Provides distraction from negative thoughts",
                "Increases energy",
            ],
            "steps": [
                "Choose gentle movements like walking, stretching, or light yoga",
                "Start slowly and listen to your body",
                "Focus on how your body feels as you move",
                "Gradually increase intensity if it feels good",
            ],
            "icon": "exercise",
        },
        {
            "id": "activity-8",
            "title": "Comfort Playlist",
            "description": "Create a playlist of songs that bring you comfort or happy memories.",
            "duration": "20 min",
            "category": "Creative",
            "benefits": [
                "Uses music to shift emotional state",
                "Creates a resource for future use",
                "Encourages emotional processing",
            ],
            "steps": [
                "Think of songs that have positive associations or memories",
                "Create a playlist you can easily access",
                "Listen mindfully, allowing yourself to feel the emotions that arise",
                "Consider adding uplifting songs toward the end",
            ],
            "icon": "art",
        },
    ],
    "Neutral": [
        {
            "id": "activity-9",
            "title": "Mindfulness Meditation",
            "description": "A simple meditation to increase awareness and mental clarity.",
            "duration": "10 min",
            "category": "Meditation",
            "benefits": ["Improves focus", "Reduces stress", "Increases self-awareness"],
            "steps": [
                "Find a comfortable seated position",
                "Focus your attention on your breath",
                "When your mind wanders, gently bring it back to your breath",
                "Continue for 10 minutes, gradually increasing time as you practice",
            ],
            "icon": "meditation",
        },
        {
            "id": "activity-10",
            "title": "Nature Connection",
            "description": "Spend time outdoors to refresh your mind and boost your mood.",
            "duration": "20 min",
            "category": "Outdoor",
            "benefits": ["Reduces mental fatigue", "Improves mood", "Increases vitamin D"],
            "steps": [
                "Find a natural setting (park, garden, or even a tree-lined street)",
                "Walk slowly, noticing the details around you",
                "Use all your senses to experience nature",
                "If possible, find a spot to sit quietly for a few minutes",
            ],
            "icon": "nature",
        },
    ],
}


def _track(track_id, title, artist, duration, slug, icon, mood):
    return {
        "id": track_id,
        "title": title,
        "artist": artist,
        "duration": duration,
        "coverUrl": f"/placeholder.svg?height=200&width=200&text={icon}",
        "audioUrl": f"https://example.com/audio/{slug}.mp3",
        "mood": mood,
    }


MUSIC = {
    "Happy": [
        _track("music-1", "Sunny Day Vibes", "Mood Lifters", "3:45", "sunny-day", "🎵", "Happy"),
        _track("music-2", "Upbeat Journey", "Positive Rhythms", "4:12", "upbeat-journey", "🎵", "Happy"),
        _track("music-3", "Joyful Morning", "Sunrise Sounds", "3:28", "joyful-morning", "🎵", "Happy"),
        _track("music-4", "Celebration", "Happy Tunes", "3:55", "celebration", "🎵", "Happy"),
    ],
    "Calm": [
        _track("music-5", "Ocean Waves", "Nature Sounds", "5:20", "ocean-waves", "🌊", "Calm"),
        _track("music-6", "Gentle Rain", "Ambient Moods", "6:15", "gentle-rain", "🌧️", "Calm"),
        _track("music-7", "Peaceful Piano", "Relaxing Keys", "4:45", "peaceful-piano", "🎹", "Calm"),
        _track("music-8", "Meditation Bells", "Zen Masters", "7:30", "meditation-bells", "🔔", "Calm"),
    ],
    "Anxious": [
        _track("music-9", "Stress Relief", "Anxiety Soothers", "8:15", "stress-relief", "🧘‍♀️", "Anxious"),
        _track("music-10", "Calming Frequencies", "Binaural Beats", "10:00", "calming-frequencies", "🎧", "Anxious"),
        _track("music-11", "Deep Breathing", "Guided Relaxation", "5:45", "deep-breathing", "💨", "Anxious"),
        _track("music-12", "Forest Sounds", "Nature Therapy", "9:20", "forest-sounds", "🌲", "Anxious"),
    ],
    "Sad": [
        _track("music-13", "Emotional Healing", "Comfort Sounds", "6:40", "emotional-healing", "💙", "Sad"),
        _track("music-14", "Gentle Comfort", "Soothing Melodies", "5:30", "gentle-comfort", "🎵", "Sad"),
        _track("music-15", "Rainy Day", "Melancholy Moods", "4:55", "rainy-day", "🌧️", "Sad"),
        _track("music-16", "Hope Ahead", "Uplifting Transitions", "5:15", "hope-ahead", "🌈", "Sad"),
    ],
    "Neutral": [
        _track("music-17", "Balanced Energy", "Harmony Sounds", "4:30", "balanced-energy", "⚖️", "Neutral"),
        _track("music-18", "Mindful Moment", "Present Awareness", "5:10", "mindful-moment", "🧠", "Neutral"),
        _track("music-19", "Gentle Focus", "Concentration Aids", "6:25", "gentle-focus", "🔍", "Neutral"),
        _track("music-20", "Ambient Flow", "Background Harmony", "7:15", "ambient-flow", "🌊", "Neutral"),
    ],
}

# Shown right after a mood check-in
QUICK = {
    "Anxious": [
        {
            "id": "rec-1",
            "title": "5-Minute Breathing Exercise",
            "description": "A quick breathing technique to help reduce anxiety",
            "type": "exercise",
            "duration": "5 min",
        },
        {
            "id": "rec-2",
            "title": "Progressive Muscle Relaxation",
            "description": "Tense and relax each muscle group to release physical tension",
            "type": "exercise",
            "duration": "10 min",
        },
    ],
    "Sad": [
        {
            "id": "rec-3",
            "title": "Gratitude Journaling",
            "description": "Write down three things you're grateful for to shift perspective",
            "type": "activity",
            "duration": "5 min",
        },
        {
            "id": "rec-4",
            "title": "Mood-Boosting Playlist",
            "description": "Listen to uplifting music that can help improve your mood",
            "type": "media",
            "duration": "15 min",
        },
    ],
    "Neutral": [
        {
            "id": "rec-5",
            "title": "Mindfulness Meditation",
            "description": "A guided meditation to help maintain emotional balance",
            "type": "exercise",
            "duration": "10 min",
        },
        {
            "id": "rec-6",
            "title": "Nature Walk",
            "description": "Spending time in nature can help maintain positive mood",
            "type": "activity",
            "duration": "20 min",
        },
    ],
}
QUICK["Stressed"] = QUICK["Anxious"]
