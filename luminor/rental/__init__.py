"""Event-sourced rentals linking tenant parties to subjects, with facade and projection."""