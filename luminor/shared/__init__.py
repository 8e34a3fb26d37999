"""Value types shared across the application."""